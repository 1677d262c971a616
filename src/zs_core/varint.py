"""ULEB128 variable-length integers."""
from __future__ import annotations


def encode_uleb128(value: int) -> bytes:
    """Encode a non-negative integer as minimal ULEB128."""
    if value < 0:
        raise ValueError(f"ULEB128 requires a non-negative value, got {value}")
    out = bytearray()
    while True:
        b = value & 0x7F
        value >>= 7
        if value:
            # More bytes to come
            out.append(b | 0x80)
        else:
            out.append(b)
            return bytes(out)


def decode_uleb128(buf: bytes, pos: int = 0) -> tuple[int, int]:
    """Decode a ULEB128 value starting at ``pos``. Returns (value, next_pos)."""
    value = 0
    shift = 0
    while True:
        if pos >= len(buf):
            raise ValueError("Truncated ULEB128")
        b = buf[pos]
        pos += 1
        value |= (b & 0x7F) << shift
        if not b & 0x80:
            return value, pos
        shift += 7
