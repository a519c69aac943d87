"""Byte-level GIF builder for tests."""
import struct
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from gifcaption.lzw import block_join, lzw_compress, min_code_size_for

BLACK, RED, GREEN, BLUE = 0, 1, 2, 3
PALETTE = [(0, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)]

RGBA_RED = (255, 0, 0, 255)
RGBA_GREEN = (0, 255, 0, 255)
RGBA_BLUE = (0, 0, 255, 255)
RGBA_CLEAR = (0, 0, 0, 0)

NETSCAPE_FOREVER = b"\x21\xFF\x0BNETSCAPE2.0\x03\x01\x00\x00\x00"


@dataclass
class FrameSpec:
    left: int
    top: int
    width: int
    height: int
    indices: bytes
    disposal: int = 1
    delay: int = 0
    transparent: Optional[int] = None
    palette: Optional[List[Tuple[int, int, int]]] = None
    interlace: bool = False
    gce: bool = True


def solid(width, height, index):
    return bytes([index]) * (width * height)


def color_table(colors):
    exp = min_code_size_for(len(colors)) - 1
    data = bytearray()
    for r, g, b in colors:
        data += bytes((r, g, b))
    data += bytes(3 * ((1 << (exp + 1)) - len(colors)))
    return exp, bytes(data)


def build_gif(width, height, frames: Sequence[FrameSpec], gct=PALETTE,
              extensions=NETSCAPE_FOREVER, trailer=True):
    out = bytearray(b"GIF89a")
    packed = 0
    table = b""
    if gct:
        exp, table = color_table(gct)
        packed = 0x80 | 0x70 | exp
    out += struct.pack("<HHBBB", width, height, packed, 0, 0)
    out += table
    out += extensions

    for f in frames:
        if f.gce:
            flags = (f.disposal << 2) | (1 if f.transparent is not None else 0)
            out += b"\x21\xF9\x04" + struct.pack("<BHBB", flags, f.delay, f.transparent or 0, 0)
        flags = 0x40 if f.interlace else 0
        local = b""
        if f.palette:
            exp, local = color_table(f.palette)
            flags |= 0x80 | exp
        out += b"\x2C" + struct.pack("<HHHHB", f.left, f.top, f.width, f.height, flags)
        out += local
        code_size = min_code_size_for(len(f.palette or gct))
        out += bytes((code_size,)) + block_join(lzw_compress(f.indices, code_size))

    if trailer:
        out.append(0x3B)
    return bytes(out)


def red_blue_gif():
    """10x10: opaque red (keep, delay 5), then a 5x5 blue patch (reset-to-background, delay 8)."""
    return build_gif(10, 10, [
        FrameSpec(0, 0, 10, 10, solid(10, 10, RED), disposal=1, delay=5),
        FrameSpec(0, 0, 5, 5, solid(5, 5, BLUE), disposal=2, delay=8),
    ])


def pixel(buf, width, x, y):
    i = (y * width + x) * 4
    return tuple(buf[i:i + 4])


def rgba_image(width, height, color):
    return bytes(color) * (width * height)
