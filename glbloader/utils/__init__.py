"""
Command-line utilities.
"""
