#!/usr/bin/env python3
"""
Example: Load a GLB file and read the vertex data of its first mesh.
"""

import glbloader

document = glbloader.load("models/triangle.glb")

primitive = document.meshes[0].primitives[0]
positions = document.read_accessor(primitive.attributes["POSITION"])
print(f"Positions: {positions.shape}")

if primitive.indices is not None:
    indices = document.read_accessor(primitive.indices)
    print(f"Indices: {indices.shape}")

print("\n✅ Mesh read successfully!")
