"""
GIF block model and byte-level parser.

Reads the container structure of a GIF87a/GIF89a stream:
- Header and Logical Screen Descriptor (+ optional Global Color Table)
- Graphic Control Extension (delay, disposal, transparency), bound to the
  next image only
- Application Extension (NETSCAPE2.0 / ANIMEXTS1.0 loop count)
- Comment and Plain Text extensions (comments kept, plain text counted)
- Image Descriptor (+ optional Local Color Table) and raw LZW sub-blocks

Pixel decoding lives in decoder.py; this module never touches LZW data.
"""
from __future__ import annotations
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import DecodeError

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

SIGNATURES = (b"GIF87a", b"GIF89a")

# Block introducers & extension labels
TRAILER = 0x3B
EXTENSION = 0x21
IMAGE = 0x2C
LABEL_GCE = 0xF9
LABEL_APP = 0xFF
LABEL_COMMENT = 0xFE
LABEL_PLAINTEXT = 0x01

LOOP_APP_IDS = (b"NETSCAPE2.0", b"ANIMEXTS1.0")

# -----------------------------
# Structures
# -----------------------------

@dataclass
class LogicalScreen:
    width: int
    height: int
    gct_flag: bool
    color_resolution: int  # bits per primary - 1 (from packed field)
    sort_flag: bool
    gct_size_exp: int  # size = 2^(N+1)
    bg_color_index: int
    pixel_aspect_ratio: int  # (PAR+15)/64 if PAR != 0


@dataclass
class ImageDescriptor:
    left: int
    top: int
    width: int
    height: int
    lct_flag: bool
    interlace: bool
    sort_flag: bool
    lct_size_exp: int


@dataclass
class GraphicControl:
    disposal_method: int  # 0-7
    user_input: bool
    transparent_flag: bool
    delay_cs: int  # centiseconds
    transparent_index: Optional[int]


@dataclass
class ImageBlock:
    descriptor: ImageDescriptor
    lct: Optional[List[Color]]
    lzw_min_code_size: int
    data: bytes
    gce: Optional[GraphicControl]


@dataclass
class GIF:
    version: str
    ls: LogicalScreen
    gct: Optional[List[Color]]
    images: List[ImageBlock] = field(default_factory=list)
    loop_count: Optional[int] = None  # 0 means infinite
    comments: List[str] = field(default_factory=list)
    plaintexts: int = 0

    def palette_for(self, image: ImageBlock) -> Optional[List[Color]]:
        return image.lct if image.lct is not None else self.gct

# -----------------------------
# Readers
# -----------------------------

def read_u8(buf: io.BytesIO) -> int:
    b = buf.read(1)
    if not b:
        raise DecodeError("Unexpected EOF while reading u8")
    return b[0]


def read_u16le(buf: io.BytesIO) -> int:
    b = buf.read(2)
    if len(b) < 2:
        raise DecodeError("Unexpected EOF while reading u16")
    return b[0] | (b[1] << 8)


def read_bytes(buf: io.BytesIO, n: int) -> bytes:
    b = buf.read(n)
    if len(b) < n:
        raise DecodeError(f"Unexpected EOF while reading {n} bytes")
    return b


def read_sub_blocks(buf: io.BytesIO) -> bytes:
    chunks = []
    while True:
        n = read_u8(buf)
        if n == 0:
            break
        chunks.append(read_bytes(buf, n))
    return b"".join(chunks)


def parse_color_table(buf: io.BytesIO, size_exp: int) -> List[Color]:
    size = 2 ** (size_exp + 1)
    data = read_bytes(buf, 3 * size)
    return [(data[i], data[i+1], data[i+2]) for i in range(0, len(data), 3)]

# -----------------------------
# Parsing
# -----------------------------

def parse_logical_screen(buf: io.BytesIO) -> LogicalScreen:
    width = read_u16le(buf)
    height = read_u16le(buf)
    packed = read_u8(buf)
    return LogicalScreen(
        width=width,
        height=height,
        gct_flag=(packed & 0b1000_0000) != 0,
        color_resolution=(packed & 0b0111_0000) >> 4,
        sort_flag=(packed & 0b0000_1000) != 0,
        gct_size_exp=packed & 0b0000_0111,
        bg_color_index=read_u8(buf),
        pixel_aspect_ratio=read_u8(buf),
    )


def parse_graphic_control(buf: io.BytesIO) -> GraphicControl:
    block_size = read_u8(buf)
    if block_size != 4:
        raise DecodeError("Bad GCE block size")
    packed = read_u8(buf)
    transparent_flag = (packed & 1) == 1
    delay_cs = read_u16le(buf)
    transparent_index = read_u8(buf)
    if read_u8(buf) != 0:
        raise DecodeError("Missing GCE block terminator")
    return GraphicControl(
        disposal_method=(packed >> 2) & 0b111,
        user_input=((packed >> 1) & 1) == 1,
        transparent_flag=transparent_flag,
        delay_cs=delay_cs,
        transparent_index=transparent_index if transparent_flag else None,
    )


def parse_image(buf: io.BytesIO, gce: Optional[GraphicControl]) -> ImageBlock:
    left = read_u16le(buf)
    top = read_u16le(buf)
    iw = read_u16le(buf)
    ih = read_u16le(buf)
    packed = read_u8(buf)
    descriptor = ImageDescriptor(
        left, top, iw, ih,
        lct_flag=(packed & 0b1000_0000) != 0,
        interlace=(packed & 0b0100_0000) != 0,
        sort_flag=(packed & 0b0010_0000) != 0,
        lct_size_exp=packed & 0b0000_0111,
    )
    lct = parse_color_table(buf, descriptor.lct_size_exp) if descriptor.lct_flag else None
    lzw_min_code_size = read_u8(buf)
    if not 1 <= lzw_min_code_size <= 8:
        raise DecodeError(f"Invalid LZW minimum code size: {lzw_min_code_size}")
    data = read_sub_blocks(buf)
    return ImageBlock(descriptor, lct, lzw_min_code_size, data, gce)


def parse_gif(data: bytes) -> GIF:
    buf = io.BytesIO(data)
    header = read_bytes(buf, 6)
    if header not in SIGNATURES:
        raise DecodeError("Not a GIF file (missing GIF87a/89a)")
    version = header.decode('ascii')

    ls = parse_logical_screen(buf)
    gct = parse_color_table(buf, ls.gct_size_exp) if ls.gct_flag else None
    gif = GIF(version, ls, gct)
    gce: Optional[GraphicControl] = None

    while True:
        b = buf.read(1)
        if not b:
            # Tolerate streams that end after a complete block without a trailer
            logger.debug("stream ended without trailer after %d images", len(gif.images))
            break
        b0 = b[0]
        if b0 == TRAILER:
            break
        elif b0 == EXTENSION:
            label = read_u8(buf)
            if label == LABEL_GCE:
                gce = parse_graphic_control(buf)
            elif label == LABEL_APP:
                block_size = read_u8(buf)
                app_id = read_bytes(buf, block_size)
                app_data = read_sub_blocks(buf)
                if app_id.startswith(LOOP_APP_IDS):
                    # Netscape looping: sub-block "\x01 <loops: u16>"
                    if len(app_data) >= 3 and app_data[0] == 1:
                        gif.loop_count = app_data[1] | (app_data[2] << 8)
            elif label == LABEL_COMMENT:
                gif.comments.append(read_sub_blocks(buf).decode('utf-8', 'replace'))
            elif label == LABEL_PLAINTEXT:
                block_size = read_u8(buf)
                read_bytes(buf, block_size)
                read_sub_blocks(buf)
                gif.plaintexts += 1
            else:
                # Unknown extension, skip sub-blocks
                read_sub_blocks(buf)
        elif b0 == IMAGE:
            gif.images.append(parse_image(buf, gce))
            gce = None  # GCE applies to next image only
        else:
            raise DecodeError(f"Unknown block introducer: 0x{b0:02X}")

    logger.debug("parsed %s %dx%d with %d images",
                 gif.version, ls.width, ls.height, len(gif.images))
    return gif
