"""Turn GIF bytes into a sequence of fully composited RGBA snapshots."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .blocks import GIF, ImageBlock, parse_gif
from .canvas import DeltaFrame, Disposal, apply_delta, new_canvas
from .errors import DecodeError, InvalidState
from .lzw import deinterlace, lzw_decompress

logger = logging.getLogger(__name__)

TRANSPARENT = b"\x00\x00\x00\x00"


@dataclass
class DecodedAnimation:
    width: int
    height: int
    snapshots: List[bytes]
    delays: List[int]
    loop_count: Optional[int] = None  # None when the file has no loop extension


def build_palette(colors, transparent_index) -> List[bytes]:
    # Full 256-entry lookup; out-of-range indices decode as transparent
    lut = [TRANSPARENT] * 256
    for i, (r, g, b) in enumerate(colors[:256]):
        lut[i] = bytes((r, g, b, 255))
    if transparent_index is not None:
        lut[transparent_index] = TRANSPARENT
    return lut


def to_delta_frame(gif: GIF, image: ImageBlock) -> DeltaFrame:
    colors = gif.palette_for(image)
    if not colors:
        raise DecodeError("Missing color table")

    d = image.descriptor
    gce = image.gce
    count = d.width * d.height
    indices = lzw_decompress(image.lzw_min_code_size, image.data)

    lut = build_palette(colors, gce.transparent_index if gce else None)
    pixels = b"".join(lut[i] for i in indices[:count])
    if len(indices) < count:
        logger.debug("image data short by %d pixels, padding transparent",
                     count - len(indices))
        pixels += TRANSPARENT * (count - len(indices))
    # Pad before reordering so missing interlace passes stay transparent
    if d.interlace:
        pixels = deinterlace(pixels, d.width, d.height, bpp=4)

    return DeltaFrame(
        left=d.left,
        top=d.top,
        width=d.width,
        height=d.height,
        disposal=Disposal.from_code(gce.disposal_method if gce else 0),
        pixels=pixels,
        delay=gce.delay_cs if gce else 0,
    )


def iter_delta_frames(gif: GIF) -> Iterator[DeltaFrame]:
    for image in gif.images:
        yield to_delta_frame(gif, image)


def decode(data: bytes) -> DecodedAnimation:
    if not data:
        raise InvalidState("Empty GIF data provided")

    gif = parse_gif(data)
    width, height = gif.ls.width, gif.ls.height

    canvas = new_canvas(width, height)
    previous = new_canvas(width, height)
    snapshots: List[bytes] = []
    delays: List[int] = []

    for i, frame in enumerate(iter_delta_frames(gif)):
        snapshots.append(apply_delta(canvas, previous, frame, width, height))
        delays.append(frame.delay)
        logger.debug("frame %d: %dx%d at (%d,%d) disposal=%s delay=%d",
                     i, frame.width, frame.height, frame.left, frame.top,
                     frame.disposal.value, frame.delay)

    if not snapshots:
        raise InvalidState("No frames found in GIF")

    return DecodedAnimation(width, height, snapshots, delays, gif.loop_count)
