# nbs/reader.py
# Little-endian reads over a sequential binary stream. Short reads raise
# EOFError instead of returning -1 the way InputStream.read() does.
import struct
from typing import BinaryIO

CHUNK = 64 * 1024

class ByteReader:
    def __init__(self, f: BinaryIO):
        self.f = f
        self.pos = 0

    def read_exact(self, n: int, ctx: str) -> bytes:
        if n <= CHUNK:
            b = self.f.read(n)
        else:
            # garbage lengths must not allocate gigabytes up front
            parts = []
            left = n
            while left:
                part = self.f.read(min(left, CHUNK))
                if not part:
                    break
                parts.append(part)
                left -= len(part)
            b = b"".join(parts)
        if len(b) != n:
            raise EOFError(f"Needed {n} bytes for {ctx} at offset {self.pos}, got {len(b)}")
        self.pos += n
        return b

    def read_u8(self, ctx: str = "u8") -> int:
        return self.read_exact(1, ctx)[0]

    def read_u16(self, ctx: str = "u16") -> int:
        return struct.unpack('<H', self.read_exact(2, ctx))[0]

    def read_u32(self, ctx: str = "u32") -> int:
        return struct.unpack('<I', self.read_exact(4, ctx))[0]

    def read_string(self, ctx: str = "string") -> str:
        """u32 byte count, then that many bytes of text."""
        n = self.read_u32(ctx + ".len")
        return self.read_exact(n, ctx + ".data").decode('utf-8', errors='replace')

    def skip(self, n: int, ctx: str = "skip"):
        self.read_exact(n, ctx)
