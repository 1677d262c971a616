"""ZS container protocol constants.

Single source of truth for on-disk magic values and header layout.
Keep this file stable. Writer and any future reader must remain synchronized.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

# File magics. A container starts BAD and is upgraded to GOOD once complete.
MAGIC_GOOD = bytes([0xAB, 0x5A, 0x53, 0x66, 0x69, 0x4C, 0x65, 0x01])  # "ZSfiLe"
MAGIC_BAD = bytes([0xAB, 0x5A, 0x53, 0x74, 0x6F, 0x42, 0x65, 0x01])   # "ZStoBe"
MAGIC_LEN = 8

# Fixed header: [Magic(8) | HdrLen(4) | RootOff(4) | RootLen(4) | FileLen(4)
#               | Digest(32) | Codec(16) | MetaLen(4)] = 76 bytes
HEADER_FIXED_FMT = "<8sIIII32s16sI"
HEADER_FIXED_LEN = struct.calcsize(HEADER_FIXED_FMT)

DIGEST_LEN = 32
CODEC_LEN = 16
CHECKSUM_LEN = 8
HEADER_LENGTH_FIELD_LEN = 4
U32_MAX = 0xFFFFFFFF

CODEC_NONE = "none"
LEVEL_FLAT = 0

# Offsets of the fixed header fields
OFF_HEADER_LENGTH = 8
OFF_ROOT_OFFSET = 12
OFF_ROOT_LENGTH = 16
OFF_FILE_LENGTH = 20
OFF_DIGEST = 24
OFF_CODEC = 56
OFF_METADATA_LENGTH = 72
OFF_METADATA = 76

# Constant carried by the first ZS writer in header_length and file_length
LEGACY_HEADER_CONSTANT = 224
FILE_LENGTH_PLACEHOLDER = 224

FILE_EXTENSION = ".zs"


@dataclass(frozen=True)
class ReservedIndex:
    """Pointers to the index block.

    The index block is not defined yet, so every container is index-less
    and both fields are written as zero.
    """

    root_offset: int = 0
    root_length: int = 0


RESERVED_INDEX = ReservedIndex()


@dataclass(frozen=True)
class LayoutProfile:
    """Size arithmetic used when laying out a container."""

    name: str
    header_constant: int
    fixed_header_len: int
    block_overhead: int
    file_length: int
    length_field_len: int = HEADER_LENGTH_FIELD_LEN

    def header_length(self, digest_len: int, codec_len: int, metadata_len: int) -> int:
        if self.fixed_header_len:
            return self.fixed_header_len + metadata_len
        return (
            MAGIC_LEN + self.length_field_len + self.header_constant
            + digest_len + codec_len + metadata_len
        )

    def block_length(self, payload_len: int) -> int:
        return payload_len + self.block_overhead


# 8 (magic) + 4 (header_length) + 224 + digest + codec + metadata,
# block_length = n + 2.
LEGACY = LayoutProfile(
    name="legacy",
    header_constant=LEGACY_HEADER_CONSTANT,
    fixed_header_len=0,
    block_overhead=2,
    file_length=FILE_LENGTH_PLACEHOLDER,
)

# Same size arithmetic as the first ZS writer, which left the header_length
# field out: 8 + 224 + digest + codec + metadata, block_length = n + 2.
ZSIO = LayoutProfile(
    name="zsio",
    header_constant=LEGACY_HEADER_CONSTANT,
    fixed_header_len=0,
    block_overhead=2,
    file_length=FILE_LENGTH_PLACEHOLDER,
    length_field_len=0,
)

# Corrected arithmetic: header_length is the real header size including magic,
# block_length covers the level byte plus payload.
V2 = LayoutProfile(
    name="v2",
    header_constant=0,
    fixed_header_len=HEADER_FIXED_LEN,
    block_overhead=1,
    file_length=FILE_LENGTH_PLACEHOLDER,
)

PROFILES = {p.name: p for p in (LEGACY, ZSIO, V2)}
