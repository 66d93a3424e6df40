#!/usr/bin/env python3
"""
GLB File Inspector - Show the container layout and glTF content of GLB files
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ..common import CHUNK_HEADER_SIZE, GLB_HEADER_SIZE
from ..container import Container, read_glb_file, validate_container
from ..exceptions import LoaderError

logger = logging.getLogger(__name__)

# Document sections counted in the content summary
SECTIONS = [
    'scenes', 'nodes', 'meshes', 'materials', 'textures', 'images',
    'accessors', 'bufferViews', 'buffers', 'animations', 'cameras',
]


def get_info(container: Container) -> Dict[str, Any]:
    """
    Summarize the container layout.

    Args:
        container: Parsed GLB container

    Returns:
        Dictionary with sizes and chunk statistics
    """
    json_chunk = container.json_chunk
    binary_chunk = container.binary_chunk

    return {
        'magic': container.magic.decode('latin-1'),
        'version': container.version,
        'total_size': container.length,
        'header_size': GLB_HEADER_SIZE,
        'json_chunk_size': json_chunk.length + CHUNK_HEADER_SIZE if json_chunk else 0,
        'binary_chunk_size': binary_chunk.length + CHUNK_HEADER_SIZE if binary_chunk else 0,
        'has_binary': container.has_binary,
        'chunk_count': len(container.chunks),
    }


def get_json_map(container: Container) -> Optional[Dict[str, Any]]:
    """Decode the JSON chunk, or None if it is not valid JSON."""
    try:
        return json.loads(container.get_json())
    except (UnicodeDecodeError, ValueError):
        return None


def inspect_glb(file_path, strict: bool = False) -> Dict[str, Any]:
    """Inspect a GLB file and print its structure."""

    container = read_glb_file(file_path)

    print(f"\n{'='*70}")
    print(f"GLB FILE INSPECTION: {Path(file_path).name}")
    print(f"{'='*70}")

    info = get_info(container)

    # 1. Container layout
    print("\n1. CONTAINER:")
    print(f"   Magic: {info['magic']}")
    print(f"   Version: {info['version']}")
    print(f"   Total Size: {info['total_size']} bytes")
    print(f"   Header Size: {info['header_size']} bytes")
    print(f"   JSON Chunk Size: {info['json_chunk_size']} bytes")
    print(f"   Binary Chunk Size: {info['binary_chunk_size']} bytes")
    print(f"   Chunk Count: {info['chunk_count']}")
    for i, chunk in enumerate(container.chunks):
        print(f"      Chunk[{i}]: {chunk.type} ({chunk.length} bytes)")

    # 2. Validation
    print("\n2. VALIDATION:")
    try:
        validate_container(container, strict=strict)
        print(f"   ✅ Container is valid{' (strict)' if strict else ''}")
        info['valid'] = True
    except LoaderError as e:
        print(f"   ⚠️ {e}")
        info['valid'] = False

    # 3. Asset and content
    json_map = get_json_map(container)
    if json_map is None:
        print("\n3. Could not parse JSON content for detailed info")
        return info

    asset = json_map.get('asset') or {}
    print("\n3. ASSET:")
    print(f"   Version: {asset.get('version', 'unknown')}")
    print(f"   Generator: {asset.get('generator', 'unknown')}")
    print(f"   Copyright: {asset.get('copyright', 'none')}")

    print("\n4. CONTENT:")
    counts = {}
    for key in SECTIONS:
        count = len(json_map.get(key) or [])
        counts[key] = count
        if count > 0:
            print(f"   {key[0].upper() + key[1:]}: {count}")
    info['counts'] = counts

    return info


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Inspect GLB container files')
    parser.add_argument('files', nargs='+', help='GLB files to inspect')
    parser.add_argument('--strict', action='store_true', help='Check alignment and padding')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )

    failures = 0
    for file_path in args.files:
        try:
            inspect_glb(file_path, strict=args.strict)
        except LoaderError as e:
            logger.error(f"{file_path}: {e}")
            failures += 1

    print("\n" + "="*70)
    print("INSPECTION COMPLETE")
    print("="*70)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
