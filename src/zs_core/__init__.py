"""ZS Core - format constants, varints, digests and build metadata."""
from .varint import encode_uleb128, decode_uleb128
from .digest import sha256, crc64, crc64_file
from .metadata import build_metadata, format_timestamp

__all__ = [
    "encode_uleb128",
    "decode_uleb128",
    "sha256",
    "crc64",
    "crc64_file",
    "build_metadata",
    "format_timestamp",
]
