"""### Read and write the EWKB envelope of a serialized geometry. ###

EWKB is WKB with PostGIS extensions in the type word of each geometry:

    0x80000000  has Z
    0x40000000  has M
    0x20000000  has SRID, a 4-byte integer following the type word (top level only)

OGR does not understand the SRID, so the SRID is split off before OGR sees the bytes
and written back after OGR has serialized the geometry. The Z and M flags of every
nested geometry are exchanged with OGR as ISO type codes (1000 Z, 2000 M, 3000 ZM),
so measured geometries come back with the same EWKB flags they went in with.
Coordinate values are never read here. They belong to OGR.
"""

# Standard Library
import struct
from typing import Tuple


EWKB_Z = 0x80000000
EWKB_M = 0x40000000
EWKB_SRID = 0x20000000
EWKB_TYPE_MASK = 0x0000FFFF

# Bits that are neither a dimension flag, the SRID flag nor part of the type code.
_EWKB_UNKNOWN_BITS = 0x1FFF0000

_HEADER_SIZE = 5
_SRID_SIZE = 4


def _ewkb_get_endian(data: bytes) -> str:
    """Get the struct byte order character of an EWKB buffer.

    Raises
    ------
    ValueError
        If the buffer is empty or the byte order marker is invalid.
    """
    if len(data) < 1:
        raise ValueError("EWKB is empty")

    marker = data[0]
    if marker == 0:
        return ">"
    if marker == 1:
        return "<"

    raise ValueError(f"Invalid EWKB byte order marker: {marker}")


def _ewkb_read_header(data: bytes) -> Tuple[str, int, int, int]:
    """Reads the top level header of an EWKB buffer.

    Parameters
    ----------
    data : bytes
        The EWKB buffer.

    Returns
    -------
    Tuple[str, int, int, int]
        (byte order character, type word, srid, offset of the geometry body).
        The srid is 0 when the SRID flag is not set.

    Raises
    ------
    ValueError
        If the buffer is too short to hold the header it announces.
    """
    endian = _ewkb_get_endian(data)

    if len(data) < _HEADER_SIZE:
        raise ValueError("EWKB is too short to hold a geometry type")

    type_word = struct.unpack_from(f"{endian}I", data, 1)[0]

    if not type_word & EWKB_SRID:
        return endian, type_word, 0, _HEADER_SIZE

    if len(data) < _HEADER_SIZE + _SRID_SIZE:
        raise ValueError("EWKB announces an SRID but is too short to hold it")

    srid = struct.unpack_from(f"{endian}i", data, _HEADER_SIZE)[0]

    return endian, type_word, srid, _HEADER_SIZE + _SRID_SIZE


def _ewkb_get_srid(data: bytes) -> int:
    """Get the SRID of an EWKB buffer. 0 if it has none."""
    return _ewkb_read_header(data)[2]


def _ewkb_strip_srid(data: bytes) -> Tuple[bytes, int, str]:
    """Removes the SRID from an EWKB buffer.

    Parameters
    ----------
    data : bytes
        The EWKB buffer.

    Returns
    -------
    Tuple[bytes, int, str]
        (WKB without the SRID, the srid, the byte order character)
    """
    endian, type_word, srid, body_offset = _ewkb_read_header(data)

    if not type_word & EWKB_SRID:
        return bytes(data), srid, endian

    header = bytes(data[:1]) + struct.pack(f"{endian}I", type_word & ~EWKB_SRID)

    return header + bytes(data[body_offset:]), srid, endian


def _ewkb_set_srid(data: bytearray, srid: int) -> bytearray:
    """Writes an SRID into the header of an EWKB buffer, in place.

    An SRID of 0 (unknown) removes the SRID flag and the stored value.

    Parameters
    ----------
    data : bytearray
        The EWKB buffer. Modified in place.
    srid : int
        The SRID to write.

    Returns
    -------
    bytearray
        The same buffer.
    """
    if not isinstance(data, bytearray):
        raise TypeError(f"data must be a bytearray. Received: {type(data)}")

    endian, type_word, _srid, body_offset = _ewkb_read_header(data)
    has_srid = bool(type_word & EWKB_SRID)

    if srid == 0:
        if has_srid:
            struct.pack_into(f"{endian}I", data, 1, type_word & ~EWKB_SRID)
            del data[_HEADER_SIZE:body_offset]
        return data

    if has_srid:
        struct.pack_into(f"{endian}i", data, _HEADER_SIZE, srid)
        return data

    struct.pack_into(f"{endian}I", data, 1, type_word | EWKB_SRID)
    data[_HEADER_SIZE:_HEADER_SIZE] = struct.pack(f"{endian}i", srid)

    return data


# Base geometry types by body layout.
_POINT_TYPES = (1,)
_SEQUENCE_TYPES = (2, 8, 13)  # LineString, CircularString, Curve
_RING_TYPES = (3, 17)  # Polygon, Triangle
_COLLECTION_TYPES = (4, 5, 6, 7, 9, 10, 11, 12, 14, 15, 16)


def _wkb_split_type(type_word: int) -> Tuple[int, bool, bool]:
    """Splits an EWKB or ISO type word into (base type, has z, has m)."""
    if type_word & _EWKB_UNKNOWN_BITS:
        raise ValueError(f"Invalid WKB geometry type: {type_word:#010x}")

    dims, base = divmod(type_word & EWKB_TYPE_MASK, 1000)

    if dims > 3:
        raise ValueError(f"Invalid WKB geometry type: {type_word:#010x}")

    has_z = bool(type_word & EWKB_Z) or dims in (1, 3)
    has_m = bool(type_word & EWKB_M) or dims in (2, 3)

    return base, has_z, has_m


def _wkb_read_count(data: bytearray, offset: int, endian: str) -> Tuple[int, int]:
    if len(data) < offset + 4:
        raise ValueError("WKB is truncated")

    return struct.unpack_from(f"{endian}I", data, offset)[0], offset + 4


def _wkb_skip(data: bytearray, offset: int, size: int) -> int:
    if len(data) < offset + size:
        raise ValueError("WKB is truncated")

    return offset + size


def _wkb_rewrite_types(data: bytearray, offset: int, to_iso: bool) -> int:
    """Rewrites the type word of the geometry at `offset` and of every geometry nested in it.

    Parameters
    ----------
    data : bytearray
        The WKB buffer, without a top level SRID. Modified in place.
    offset : int
        Where the geometry starts.
    to_iso : bool
        If True, write ISO type codes. Otherwise write EWKB dimension flags.

    Returns
    -------
    int
        The offset just past the geometry.

    Raises
    ------
    ValueError
        If the buffer is truncated, or holds an SRID or a type it cannot walk.
    """
    endian = _ewkb_get_endian(data[offset:offset + 1])

    if len(data) < offset + _HEADER_SIZE:
        raise ValueError("WKB is truncated")

    type_word = struct.unpack_from(f"{endian}I", data, offset + 1)[0]

    if type_word & EWKB_SRID:
        raise ValueError("Only the outermost geometry may carry an SRID")

    base, has_z, has_m = _wkb_split_type(type_word)

    if to_iso:
        type_word = base + (1000 if has_z else 0) + (2000 if has_m else 0)
    else:
        type_word = base | (EWKB_Z if has_z else 0) | (EWKB_M if has_m else 0)

    struct.pack_into(f"{endian}I", data, offset + 1, type_word)

    offset += _HEADER_SIZE
    point_size = 8 * (2 + int(has_z) + int(has_m))

    if base in _POINT_TYPES:
        return _wkb_skip(data, offset, point_size)

    if base in _SEQUENCE_TYPES:
        count, offset = _wkb_read_count(data, offset, endian)
        return _wkb_skip(data, offset, count * point_size)

    if base in _RING_TYPES:
        rings, offset = _wkb_read_count(data, offset, endian)
        for _ in range(rings):
            count, offset = _wkb_read_count(data, offset, endian)
            offset = _wkb_skip(data, offset, count * point_size)
        return offset

    if base in _COLLECTION_TYPES:
        members, offset = _wkb_read_count(data, offset, endian)
        for _ in range(members):
            offset = _wkb_rewrite_types(data, offset, to_iso)
        return offset

    raise ValueError(f"Unsupported WKB geometry type: {base}")


def _ewkb_to_iso(data: bytes) -> bytes:
    """Converts an EWKB geometry without an SRID to ISO WKB.

    Raises
    ------
    ValueError
        If the geometry is malformed or followed by trailing bytes.
    """
    buffer = bytearray(data)
    end = _wkb_rewrite_types(buffer, 0, True)

    if end != len(buffer):
        raise ValueError(f"{len(buffer) - end} trailing bytes after the geometry")

    return bytes(buffer)


def _iso_to_ewkb(data: bytes) -> bytearray:
    """Converts an ISO WKB geometry to EWKB without an SRID."""
    buffer = bytearray(data)
    _wkb_rewrite_types(buffer, 0, False)

    return buffer
