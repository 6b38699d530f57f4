"""STL loader (binary and ASCII) producing ``Mesh`` objects."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Union

import numpy as np

from src.raycast.scene.mesh import Mesh

# Binary STL: 80-byte header, uint32 count, then 50 bytes per triangle
_HEADER_SIZE = 80
_RECORD_DTYPE = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attribute", "<u2"),
    ]
)


def load_stl(source: Union[str, Path, bytes, bytearray]) -> Mesh:
    """Load an STL mesh from a path or from raw bytes.

    Binary files are recognised by their exact size; anything else starting
    with ``solid`` is parsed as ASCII.

    Raises:
        ValueError: If the data is not a well-formed STL file.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        data = Path(source).read_bytes()

    if _is_binary(data):
        return _load_binary_stl(data)
    if data.lstrip().lower().startswith(b"solid"):
        return _load_ascii_stl(data)
    raise ValueError("Data is neither binary nor ASCII STL")


def _is_binary(data: bytes) -> bool:
    if len(data) < _HEADER_SIZE + 4:
        return False
    (count,) = struct.unpack_from("<I", data, _HEADER_SIZE)
    return len(data) == _HEADER_SIZE + 4 + count * _RECORD_DTYPE.itemsize


def _load_binary_stl(data: bytes) -> Mesh:
    (count,) = struct.unpack_from("<I", data, _HEADER_SIZE)
    records = np.frombuffer(data, dtype=_RECORD_DTYPE, count=count, offset=_HEADER_SIZE + 4)
    return Mesh.from_faces(records["vertices"])


def _load_ascii_stl(data: bytes) -> Mesh:
    vertices = []
    for number, raw in enumerate(data.decode("utf-8", errors="replace").splitlines(), start=1):
        parts = raw.split()
        if not parts or parts[0].lower() != "vertex":
            continue
        if len(parts) != 4:
            raise ValueError(f"Malformed vertex on line {number}: {raw.strip()!r}")
        try:
            vertices.append((float(parts[1]), float(parts[2]), float(parts[3])))
        except ValueError as e:
            raise ValueError(f"Malformed vertex on line {number}: {raw.strip()!r}") from e

    if len(vertices) % 3 != 0:
        raise ValueError(f"ASCII STL has {len(vertices)} vertices, not a multiple of 3")
    return Mesh.from_faces(np.array(vertices, dtype=np.float64).reshape(-1, 3, 3))
