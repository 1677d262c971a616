"""ZS Container Writer.

Writes a container in three durable phases:

  1. create:   BAD magic + header, fsync, close
  2. append:   header checksum + data block, fsync, close; then data checksum
  3. finalize: overwrite the magic with GOOD, fsync

Both checksums are computed over bytes re-read from the destination after
the phase that wrote them was flushed to disk, never over the local buffer.
A write interrupted at any point leaves a file that still starts with BAD magic.

Checksum ranges:

  header_checksum: bytes [8, 76 + metadata_length), every header byte after
                   the magic. The magic is excluded since it is rewritten last.
  data_checksum:   the level byte followed by the payload bytes; the
                   payload_length varint between them is not covered.
"""
from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable

from zs_core.digest import crc64_file, sha256
from zs_core.metadata import (
    TOOL_VERSION,
    build_metadata,
    format_timestamp,
    host_name,
    user_name,
    utc_now,
)
from zs_core.protocol import (
    CODEC_LEN,
    CODEC_NONE,
    DIGEST_LEN,
    HEADER_FIXED_FMT,
    LEGACY,
    LEVEL_FLAT,
    MAGIC_BAD,
    MAGIC_GOOD,
    MAGIC_LEN,
    OFF_DIGEST,
    OFF_HEADER_LENGTH,
    RESERVED_INDEX,
    U32_MAX,
    LayoutProfile,
)
from zs_core.varint import encode_uleb128

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """Summary of a finished container write."""

    path: Path
    profile: str
    content_digest: bytes
    header_length: int
    header_checksum: bytes
    data_checksum: bytes
    payload_offset: int
    payload_length: int
    file_size: int

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "profile": self.profile,
            "content_digest": self.content_digest.hex(),
            "header_length": self.header_length,
            "header_checksum": self.header_checksum.hex(),
            "data_checksum": self.data_checksum.hex(),
            "payload_offset": self.payload_offset,
            "payload_length": self.payload_length,
            "file_size": self.file_size,
        }


def _commit(f: BinaryIO) -> None:
    """Flush Python buffers and force the bytes to disk."""
    f.flush()
    os.fdatasync(f.fileno()) if hasattr(os, "fdatasync") else os.fsync(f.fileno())


def _codec_tag(codec: str) -> bytes:
    tag = codec.encode("ascii")
    return tag.ljust(CODEC_LEN, b"\x00")


def _check_u32(name: str, value: int) -> int:
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"{name} {value} does not fit in 4 bytes")
    return value


def _as_bytes(payload: bytes | str) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


class ContainerWriter:
    """Writes ZS containers with fixed provenance settings.

    host/user default to the current environment, resolved once per writer.
    ``clock`` supplies the build time for each write that does not pass one.
    """

    def __init__(
        self,
        host: str | None = None,
        user: str | None = None,
        tool_version: str = TOOL_VERSION,
        profile: LayoutProfile = LEGACY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.host = host if host is not None else host_name()
        self.user = user if user is not None else user_name()
        self.tool_version = tool_version
        self.profile = profile
        self.clock = clock

    def build_header(self, payload: bytes, timestamp: datetime) -> bytes:
        """Magic (BAD) + fixed header fields + metadata."""
        digest = sha256(payload)
        codec = _codec_tag(CODEC_NONE)
        metadata = build_metadata(
            self.host, self.user, format_timestamp(timestamp), self.tool_version
        )
        header_length = self.profile.header_length(len(digest), len(codec), len(metadata))

        fixed = struct.pack(
            HEADER_FIXED_FMT,
            MAGIC_BAD,
            _check_u32("header_length", header_length),
            RESERVED_INDEX.root_offset,
            RESERVED_INDEX.root_length,
            self.profile.file_length,
            digest,
            codec,
            _check_u32("metadata_length", len(metadata)),
        )
        return fixed + metadata

    def write(
        self,
        path: str | os.PathLike,
        payload: bytes | str,
        timestamp: datetime | None = None,
    ) -> WriteResult:
        """Write ``payload`` as a complete container at ``path``.

        I/O errors propagate unchanged; a partial file is left in place.
        """
        path = Path(path)
        data = _as_bytes(payload)
        if timestamp is None:
            timestamp = self.clock()

        header = self.build_header(data, timestamp)
        header_length = struct.unpack_from("<I", header, OFF_HEADER_LENGTH)[0]

        # 1. Magic number and header
        with open(path, "wb") as f:
            f.write(header)
            _commit(f)
        header_checksum = crc64_file(path, [(MAGIC_LEN, len(header) - MAGIC_LEN)])
        logger.debug("%s: header %d bytes, crc64 %s", path, len(header), header_checksum.hex())

        # 2. Header checksum and data block
        block_length = encode_uleb128(self.profile.block_length(len(data)))
        payload_length = encode_uleb128(len(data))
        level_offset = len(header) + len(header_checksum) + len(block_length)
        payload_offset = level_offset + 1 + len(payload_length)

        with open(path, "ab") as f:
            f.write(header_checksum)
            f.write(block_length)
            f.write(bytes([LEVEL_FLAT]))
            f.write(payload_length)
            f.write(data)
            _commit(f)
        data_checksum = crc64_file(path, [(level_offset, 1), (payload_offset, len(data))])
        logger.debug("%s: data block %d bytes, crc64 %s", path, len(data), data_checksum.hex())

        # 3. Data checksum. The index block is not defined yet.
        with open(path, "ab") as f:
            f.write(data_checksum)
            _commit(f)

        # 4. Container complete: upgrade the magic
        with open(path, "r+b") as f:
            f.seek(0)
            f.write(MAGIC_GOOD)
            _commit(f)

        result = WriteResult(
            path=path,
            profile=self.profile.name,
            content_digest=header[OFF_DIGEST:OFF_DIGEST + DIGEST_LEN],
            header_length=header_length,
            header_checksum=header_checksum,
            data_checksum=data_checksum,
            payload_offset=payload_offset,
            payload_length=len(data),
            file_size=payload_offset + len(data) + len(data_checksum),
        )
        logger.info(
            "Wrote %s (%d bytes, payload %d bytes, profile %s)",
            path, result.file_size, result.payload_length, result.profile,
        )
        return result


def write_container(
    path: str | os.PathLike,
    payload: bytes | str,
    *,
    timestamp: datetime | None = None,
    host: str | None = None,
    user: str | None = None,
    profile: LayoutProfile = LEGACY,
) -> WriteResult:
    """Write a single container. See ContainerWriter.write."""
    writer = ContainerWriter(host=host, user=user, profile=profile)
    return writer.write(path, payload, timestamp=timestamp)
