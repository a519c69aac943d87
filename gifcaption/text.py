"""Caption rasterizer: draws outlined text onto a transparent RGBA buffer with Pillow."""
from __future__ import annotations
import logging
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .errors import CanvasError

logger = logging.getLogger(__name__)

FILL_COLOR = (255, 255, 255, 255)
STROKE_COLOR = (0, 0, 0, 255)
STROKE_WIDTH = 2
DEFAULT_FONT_SIZE = 32

BOLD_FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:\\Windows\\Fonts\\arialbd.ttf",
)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def load_font(size: int, family: Optional[str] = None) -> Font:
    """Resolve ``family`` (a font file path or name) or the first bold font found."""
    if family:
        try:
            return ImageFont.truetype(family, size)
        except OSError as e:
            raise CanvasError(f"Failed to load font {family!r}: {e}") from e
    for path in BOLD_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    logger.debug("no bold TrueType font found, using Pillow default")
    try:
        return ImageFont.load_default(size=size)
    except (OSError, TypeError) as e:
        raise CanvasError(f"Failed to load default font: {e}") from e


class TextOverlay:
    """Callable overlay renderer: ``TextOverlay(...)(width, height) -> RGBA bytes``.

    (x, y) is the left end of the text baseline.
    """

    def __init__(self, text: str, x: float, y: float,
                 font_size: int = DEFAULT_FONT_SIZE, font_family: Optional[str] = None) -> None:
        self.text = text
        self.x = x
        self.y = y
        self.font_size = font_size
        self.font_family = font_family

    def __call__(self, width: int, height: int) -> bytes:
        if not self.text:
            return bytes(width * height * 4)
        try:
            surface = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        except (ValueError, MemoryError) as e:
            raise CanvasError(f"Failed to create {width}x{height} surface: {e}") from e

        font = load_font(self.font_size, self.font_family)
        draw = ImageDraw.Draw(surface)
        # Bitmap fonts only support the default top-left anchor
        anchor = "ls" if isinstance(font, ImageFont.FreeTypeFont) else None
        draw.text((self.x, self.y), self.text, font=font, fill=FILL_COLOR, anchor=anchor,
                  stroke_width=STROKE_WIDTH, stroke_fill=STROKE_COLOR)
        return surface.tobytes()
