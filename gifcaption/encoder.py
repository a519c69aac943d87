"""
GIF89a writer for full-canvas RGBA snapshots.

Every frame is written whole (no sparse deltas) with disposal "keep", its own
local color table and the caller's delay. A NETSCAPE2.0 block makes the
animation loop forever. Frames with at most 256 colors (counting
transparency) get an exact palette; larger ones go through Pillow's
median-cut quantizer.
"""
from __future__ import annotations
import logging
import struct
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image

from .errors import EncodeError, InvalidState
from .lzw import block_join, lzw_compress, min_code_size_for

logger = logging.getLogger(__name__)

MAX_DIMENSION = 0xFFFF
MAX_DELAY = 0xFFFF
DISPOSAL_KEEP = 1

Color = Tuple[int, int, int]

# -----------------------------
# Palette conversion
# -----------------------------

def exact_palette(rgba: bytes) -> Optional[Tuple[List[Color], bytes, int]]:
    """Index ``rgba`` without loss, or return None when it needs > 256 entries.

    Returns (palette, indices, transparent_index); transparent_index is -1
    when no pixel has alpha 0. Any alpha > 0 is written opaque.
    """
    rgba = bytes(rgba)
    lookup: Dict[bytes, int] = {}
    palette: List[Color] = []
    indices = bytearray(len(rgba) // 4)
    transparent = -1
    for p in range(len(indices)):
        i = p * 4
        if rgba[i + 3] == 0:
            if transparent < 0:
                if len(palette) == 256:
                    return None
                transparent = len(palette)
                palette.append((0, 0, 0))
            indices[p] = transparent
            continue
        key = rgba[i:i + 3]
        idx = lookup.get(key)
        if idx is None:
            if len(palette) == 256:
                return None
            idx = lookup[key] = len(palette)
            palette.append((key[0], key[1], key[2]))
        indices[p] = idx
    return palette, bytes(indices), transparent


def quantized_palette(rgba: bytes, width: int, height: int) -> Tuple[List[Color], bytes, int]:
    img = Image.frombytes("RGBA", (width, height), rgba)
    alpha = img.getchannel("A").tobytes()
    has_transparency = 0 in alpha
    colors = 255 if has_transparency else 256
    rgb = img.convert("RGB")
    if has_transparency:
        # Paint hidden pixels with a visible color so they cost no palette slot
        visible = next(p for p, a in enumerate(alpha) if a)
        rgb.paste(rgb.getpixel((visible % width, visible // width)),
                  mask=img.getchannel("A").point(lambda a: 255 if a == 0 else 0))
    try:
        quantized = rgb.quantize(colors=colors, method=Image.Quantize.MEDIANCUT)
    except (ValueError, OSError) as e:
        raise EncodeError(f"palette conversion failed: {e}") from e

    flat = quantized.getpalette() or []
    used = max(quantized.tobytes(), default=0) + 1
    palette = [(flat[i], flat[i+1], flat[i+2]) for i in range(0, 3 * used, 3)]
    indices = bytearray(quantized.tobytes())
    transparent = -1
    if has_transparency:
        transparent = len(palette)
        palette.append((0, 0, 0))
        for p, a in enumerate(alpha):
            if a == 0:
                indices[p] = transparent
    return palette, bytes(indices), transparent

# -----------------------------
# Block writers
# -----------------------------

def header(width: int, height: int) -> bytes:
    # No global color table; color resolution 8 bits
    return b"GIF89a" + struct.pack("<HHBBB", width, height, 0x70, 0, 0)


def loop_extension(loops: int = 0) -> bytes:
    return b"\x21\xFF\x0BNETSCAPE2.0" + struct.pack("<BBHB", 3, 1, loops, 0)


def graphic_control(delay: int, transparent: int) -> bytes:
    packed = (DISPOSAL_KEEP << 2) | (1 if transparent >= 0 else 0)
    return b"\x21\xF9\x04" + struct.pack("<BHBB", packed, delay, max(transparent, 0), 0)


def image_block(width: int, height: int, palette: List[Color], indices: bytes) -> bytes:
    code_size = min_code_size_for(len(palette))
    table_size = 1 << code_size
    packed = 0x80 | (code_size - 1)
    table = bytearray()
    for r, g, b in palette:
        table += bytes((r, g, b))
    table += bytes(3 * (table_size - len(palette)))
    return (b"\x2C" + struct.pack("<HHHHB", 0, 0, width, height, packed)
            + bytes(table)
            + bytes((code_size,))
            + block_join(lzw_compress(indices, code_size)))

# -----------------------------
# Encoder
# -----------------------------

def encode_frame(rgba: bytes, delay: int, width: int, height: int) -> bytes:
    if len(rgba) != width * height * 4:
        raise EncodeError(
            f"frame is {len(rgba)} bytes, expected {width * height * 4}")
    if not 0 <= delay <= MAX_DELAY:
        raise EncodeError(f"delay {delay} out of range")
    converted = exact_palette(rgba)
    if converted is None:
        logger.debug("frame has more than 256 colors, quantizing")
        converted = quantized_palette(rgba, width, height)
    palette, indices, transparent = converted
    return graphic_control(delay, transparent) + image_block(width, height, palette, indices)


def encode(snapshots: Sequence[bytes], delays: Sequence[int], width: int, height: int) -> bytes:
    if not snapshots:
        raise InvalidState("No frames to process")
    if len(delays) != len(snapshots):
        raise EncodeError(f"{len(snapshots)} frames but {len(delays)} delays")
    if not (0 < width <= MAX_DIMENSION and 0 < height <= MAX_DIMENSION):
        raise EncodeError(f"invalid canvas size {width}x{height}")

    out = bytearray(header(width, height))
    out += loop_extension(0)
    for i, (rgba, delay) in enumerate(zip(snapshots, delays)):
        out += encode_frame(rgba, delay, width, height)
        logger.debug("encoded frame %d (delay=%d)", i, delay)
    out.append(0x3B)
    logger.info("encoded %d frames, %d bytes", len(snapshots), len(out))
    return bytes(out)
