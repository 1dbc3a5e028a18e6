"""Binary gesture files.

Layout (little-endian):

    name        7-bit length prefix + UTF-8 bytes (.NET BinaryWriter string)
    count       int32, number of 3D points
    points      count * 3 float32: x0, y0, z0, x1, y1, z1, ...

The layout matches what a .NET BinaryWriter produces, so files can be shared with C# capture tools.
Loading never raises to the caller: ``load_trace`` logs and returns None
for anything unreadable. ``read_trace`` is the raising variant.
"""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Optional

import numpy as np

from motion_tracker.errors import LoadFailureError
from motion_tracker.trajectory import GestureTrace

logger = logging.getLogger("motion_tracker.storage")

_COUNT = struct.Struct("<i")
_FLOAT = np.dtype("<f4")
_CHUNK = 1 << 16


def _encode_length(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _remaining(stream: BinaryIO) -> Optional[int]:
    """Bytes left before EOF, or None for streams that cannot seek."""
    if not stream.seekable():
        return None
    here = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(here)
    return end - here


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    # Sizes come from the file header; never ask for more than the stream holds.
    left = _remaining(stream)
    if left is not None and size > left:
        raise LoadFailureError(f"truncated {what}: expected {size} bytes, got {left}")
    if left is None:
        data = bytearray()
        while len(data) < size:
            chunk = stream.read(min(size - len(data), _CHUNK))
            if not chunk:
                break
            data += chunk
        data = bytes(data)
    else:
        data = stream.read(size)
    if len(data) != size:
        raise LoadFailureError(f"truncated {what}: expected {size} bytes, got {len(data)}")
    return data


def _decode_length(stream: BinaryIO) -> int:
    value = 0
    for shift in range(0, 35, 7):
        byte = _read_exact(stream, 1, "name length")[0]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value
    raise LoadFailureError("bad 7-bit encoded name length")


def write_trace(trace: GestureTrace, stream: BinaryIO):
    """Serialize ``trace`` onto a binary stream."""
    if len(trace) == 0:
        raise ValueError(f"refusing to persist empty trace {trace.name!r}")
    name = trace.name.encode("utf-8")
    stream.write(_encode_length(len(name)))
    stream.write(name)
    stream.write(_COUNT.pack(len(trace)))
    stream.write(np.ascontiguousarray(trace.points, dtype=_FLOAT).tobytes())


def read_trace(stream: BinaryIO) -> GestureTrace:
    """Deserialize one trace. Raises LoadFailureError on malformed input."""
    name_len = _decode_length(stream)
    try:
        name = _read_exact(stream, name_len, "name").decode("utf-8")
    except UnicodeDecodeError as e:
        raise LoadFailureError(f"gesture name is not UTF-8: {e}") from e

    (count,) = _COUNT.unpack(_read_exact(stream, _COUNT.size, "point count"))
    if count <= 0:
        raise LoadFailureError(f"invalid point count {count}")

    raw = _read_exact(stream, count * 3 * _FLOAT.itemsize, "point data")
    points = np.frombuffer(raw, dtype=_FLOAT).reshape(count, 3).astype(np.float64)
    return GestureTrace(name=name, points=points)


def dumps(trace: GestureTrace) -> bytes:
    buf = io.BytesIO()
    write_trace(trace, buf)
    return buf.getvalue()


def loads(data: bytes) -> GestureTrace:
    return read_trace(io.BytesIO(data))


def save_trace(trace: GestureTrace, folder: str | Path) -> Path:
    """Write ``trace`` to ``folder/<trace name>`` and return the path."""
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / trace.name
    with open(path, "wb") as f:
        write_trace(trace, f)
    logger.info("Saved gesture %s (%d points) to %s", trace.name, len(trace), path)
    return path


def load_trace(path: str | Path) -> Optional[GestureTrace]:
    """Load a gesture file, or log a warning and return None if it can't be read."""
    try:
        with open(path, "rb") as f:
            return read_trace(f)
    except (OSError, LoadFailureError) as e:
        logger.warning("Failed to load gesture %s: %s", path, e)
        return None


def load_directory(folder: str | Path) -> list[GestureTrace]:
    """Load every readable gesture file in ``folder``, sorted by file name."""
    folder = Path(folder)
    if not folder.is_dir():
        logger.warning("Gesture directory not found: %s", folder)
        return []

    traces = []
    for path in sorted(folder.iterdir()):
        if not path.is_file() or path.name.startswith("."):
            continue
        trace = load_trace(path)
        if trace is not None:
            traces.append(trace)
    return traces
