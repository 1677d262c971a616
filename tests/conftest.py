import struct
from pathlib import Path

import pytest

from zs_core.protocol import CHECKSUM_LEN, HEADER_FIXED_FMT, HEADER_FIXED_LEN
from zs_core.varint import decode_uleb128


def parse_container(path: Path) -> dict:
    """Split a written container into its fields by layout offsets."""
    raw = Path(path).read_bytes()
    magic, hlen, root_off, root_len, file_len, digest, codec, mlen = struct.unpack_from(
        HEADER_FIXED_FMT, raw, 0
    )
    header_end = HEADER_FIXED_LEN + mlen
    pos = header_end + CHECKSUM_LEN
    block_len, pos = decode_uleb128(raw, pos)
    level_off = pos
    pos += 1
    payload_len, pos = decode_uleb128(raw, pos)
    payload_off = pos
    pos += payload_len
    return {
        "raw": raw,
        "magic": magic,
        "header_length": hlen,
        "root_offset": root_off,
        "root_length": root_len,
        "file_length": file_len,
        "digest": digest,
        "codec": codec,
        "metadata": raw[HEADER_FIXED_LEN:header_end],
        "header_end": header_end,
        "header_checksum": raw[header_end:header_end + CHECKSUM_LEN],
        "block_length": block_len,
        "level": raw[level_off],
        "level_offset": level_off,
        "payload_length": payload_len,
        "payload_offset": payload_off,
        "payload": raw[payload_off:payload_off + payload_len],
        "data_checksum": raw[pos:pos + CHECKSUM_LEN],
        "trailing": raw[pos + CHECKSUM_LEN:],
    }


@pytest.fixture
def parse():
    return parse_container
