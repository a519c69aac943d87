"""Variable-length-code LZW as used by GIF image data, plus sub-block framing."""
from __future__ import annotations
from typing import Iterable, List, Optional

from .errors import DecodeError

MAX_CODES = 4096  # 12-bit code ceiling
MAX_SUB_BLOCK = 255

# -----------------------------
# Decompression
# -----------------------------

def lzw_decompress(min_code_size: int, data: bytes) -> bytes:
    """Decode GIF LZW data into palette indices (one byte per pixel).

    Stops at the end-of-information code or when the data runs out;
    callers handle short output.
    """
    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    def initial_table() -> List[bytes]:
        # clear/end slots are placeholders so table length == next code
        return [bytes((i,)) for i in range(clear_code)] + [b"", b""]

    table = initial_table()
    code_size = min_code_size + 1
    out = bytearray()
    prev: Optional[bytes] = None

    bit_buf = 0
    bit_count = 0
    pos = 0
    total = len(data)

    while True:
        while bit_count < code_size and pos < total:
            bit_buf |= data[pos] << bit_count
            bit_count += 8
            pos += 1
        if bit_count < code_size:
            break
        code = bit_buf & ((1 << code_size) - 1)
        bit_buf >>= code_size
        bit_count -= code_size

        if code == clear_code:
            table = initial_table()
            code_size = min_code_size + 1
            prev = None
            continue
        if code == end_code:
            break

        if code < len(table):
            entry = table[code]
        elif code == len(table) and prev is not None:
            # KwKwK case
            entry = prev + prev[:1]
        else:
            raise DecodeError(f"LZW: invalid code {code}")

        out += entry

        if prev is not None and len(table) < MAX_CODES:
            table.append(prev + entry[:1])
            if len(table) == (1 << code_size) and code_size < 12:
                code_size += 1
        prev = entry

    return bytes(out)


def deinterlace(data: bytes, w: int, h: int, bpp: int = 1) -> bytes:
    # GIF 4-pass interlacing; rows are w*bpp bytes wide
    stride = w * bpp
    out = bytearray(stride*h)
    i = 0
    for start, step in ((0, 8), (4, 8), (2, 4), (1, 2)):
        y = start
        while y < h:
            row = data[i:i+stride]
            out[y*stride:y*stride + len(row)] = row
            i += stride
            y += step
    return bytes(out)

# -----------------------------
# Compression
# -----------------------------

class BitWriter:
    """Packs variable-width codes LSB-first."""

    def __init__(self) -> None:
        self._out = bytearray()
        self._acc = 0
        self._bits = 0

    def write(self, code: int, size: int) -> None:
        self._acc |= code << self._bits
        self._bits += size
        while self._bits >= 8:
            self._out.append(self._acc & 0xFF)
            self._acc >>= 8
            self._bits -= 8

    def to_bytes(self) -> bytes:
        if self._bits:
            return bytes(self._out) + bytes((self._acc & 0xFF,))
        return bytes(self._out)


def lzw_compress(indices: Iterable[int], min_code_size: int) -> bytes:
    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    code_size = min_code_size + 1
    next_code = end_code + 1
    table = {}

    writer = BitWriter()
    writer.write(clear_code, code_size)

    it = iter(indices)
    prefix = next(it, None)
    if prefix is None:
        writer.write(end_code, code_size)
        return writer.to_bytes()

    for k in it:
        key = (prefix, k)
        code = table.get(key)
        if code is not None:
            prefix = code
            continue
        writer.write(prefix, code_size)
        if next_code == MAX_CODES:
            writer.write(clear_code, code_size)
            table = {}
            code_size = min_code_size + 1
            next_code = end_code + 1
        else:
            table[key] = next_code
            next_code += 1
            # the decoder widens one code later than we assign
            if next_code > (1 << code_size) and code_size < 12:
                code_size += 1
        prefix = k

    writer.write(prefix, code_size)
    if next_code >= (1 << code_size) and code_size < 12:
        code_size += 1
    writer.write(end_code, code_size)
    return writer.to_bytes()


def min_code_size_for(palette_len: int) -> int:
    size = 2
    while (1 << size) < palette_len:
        size += 1
    return size


def block_join(raw: bytes) -> bytes:
    """Split raw bytes into length-prefixed sub-blocks plus terminator."""
    blocks = bytearray()
    for start in range(0, len(raw), MAX_SUB_BLOCK):
        chunk = raw[start:start + MAX_SUB_BLOCK]
        blocks.append(len(chunk))
        blocks.extend(chunk)
    blocks.append(0)
    return bytes(blocks)
