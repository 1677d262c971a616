import sys
from pathlib import Path

# Data block is followed by an 8-byte CRC-64; the byte before it is the
# last payload byte of a non-empty container.
CHECKSUM_LEN = 8
MAGIC_LEN = 8

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: corrupt_one_byte.py <file.zs> [offset]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < MAGIC_LEN + CHECKSUM_LEN + 1:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    idx = int(sys.argv[2]) if len(sys.argv) == 3 else len(b) - CHECKSUM_LEN - 1
    if not 0 <= idx < len(b):
        print(f"Offset {idx} outside file of {len(b)} bytes.")
        raise SystemExit(2)

    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
