"""Digest and checksum providers.

- sha256: content identity of the payload.
- crc64: integrity of a written section, CRC-64/ISO (ISO 3309 polynomial,
  reflected, zero init, no final xor), serialized big-endian.
"""
from __future__ import annotations

import hashlib
import os
from typing import Iterable

import crcmod.predefined

_CHUNK_SIZE = 64 * 1024  # 64KB

# crcmod "crc-64" is the ISO 3309 variant
_CRC64_TEMPLATE = crcmod.predefined.PredefinedCrc("crc-64")


def sha256(data: bytes | str) -> bytes:
    """32-byte SHA-256 digest. Text is hashed as UTF-8."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).digest()


def crc64(data: bytes) -> bytes:
    """8-byte CRC-64/ISO of an in-memory buffer."""
    crc = _CRC64_TEMPLATE.new()
    crc.update(data)
    return crc.digest()


def crc64_file(path: str | os.PathLike, ranges: Iterable[tuple[int, int]]) -> bytes:
    """CRC-64/ISO over byte ranges re-read from a durable file.

    Every (offset, length) range is streamed through one CRC state, in order.
    Raises OSError if the file is unreadable or a range runs past EOF.
    """
    crc = _CRC64_TEMPLATE.new()
    with open(path, "rb") as f:
        for offset, length in ranges:
            f.seek(offset)
            remaining = length
            while remaining:
                chunk = f.read(min(remaining, _CHUNK_SIZE))
                if not chunk:
                    raise OSError(
                        f"Short read in {os.fspath(path)}: expected {length} bytes "
                        f"at offset {offset}, missing {remaining}"
                    )
                crc.update(chunk)
                remaining -= len(chunk)
    return crc.digest()
