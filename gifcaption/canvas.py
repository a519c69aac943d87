"""
Canvas-level pixel operations.

Everything here works on flat RGBA buffers (row-major, 4 bytes per pixel):
- apply_delta: reconstruct the next full frame from a sparse delta frame
- composite_overlay: stamp an overlay onto a full frame

Transparency is binary in both cases: a source pixel with alpha 0 never
touches the destination, any other alpha replaces all four channels.
"""
from __future__ import annotations
import enum
from dataclasses import dataclass

# -----------------------------
# Delta frames
# -----------------------------

class Disposal(enum.Enum):
    KEEP = "keep"
    BACKGROUND = "background"
    PREVIOUS = "previous"

    @classmethod
    def from_code(cls, code: int) -> "Disposal":
        # 0 (unspecified), 1 (keep) and reserved 4-7 all leave the canvas as-is
        if code == 2:
            return cls.BACKGROUND
        if code == 3:
            return cls.PREVIOUS
        return cls.KEEP


@dataclass(frozen=True)
class DeltaFrame:
    left: int
    top: int
    width: int
    height: int
    disposal: Disposal
    pixels: bytes  # RGBA, width*height*4
    delay: int = 0  # centiseconds


def new_canvas(width: int, height: int) -> bytearray:
    return bytearray(width * height * 4)


def draw(live: bytearray, frame: DeltaFrame, width: int, height: int) -> None:
    # Clip the frame rectangle to the canvas
    x0 = max(frame.left, 0)
    x1 = min(frame.left + frame.width, width)
    y0 = max(frame.top, 0)
    y1 = min(frame.top + frame.height, height)
    if x0 >= x1 or y0 >= y1:
        return

    src = frame.pixels
    fw = frame.width
    for cy in range(y0, y1):
        src_row = (cy - frame.top) * fw
        dst_row = cy * width
        for cx in range(x0, x1):
            s = (src_row + cx - frame.left) * 4
            if src[s + 3] == 0:
                continue
            d = (dst_row + cx) * 4
            live[d:d + 4] = src[s:s + 4]


def apply_delta(live: bytearray, previous: bytearray, frame: DeltaFrame,
                width: int, height: int) -> bytes:
    """Draw ``frame`` onto ``live`` and return the displayed snapshot.

    Afterwards ``live`` holds the canvas the next frame inherits: the
    frame's disposal method runs once its snapshot has been taken.
    ``previous`` is the rollback slot for restore-to-previous; both buffers
    are updated in place.
    """
    if frame.disposal is Disposal.PREVIOUS:
        previous[:] = live

    draw(live, frame, width, height)
    snapshot = bytes(live)

    if frame.disposal is Disposal.BACKGROUND:
        live[:] = bytes(len(live))
    elif frame.disposal is Disposal.PREVIOUS:
        live[:] = previous
    return snapshot

# -----------------------------
# Overlay compositing
# -----------------------------

def composite_overlay(snapshot: bytes, overlay: bytes) -> bytes:
    if len(snapshot) != len(overlay):
        raise ValueError(
            f"overlay is {len(overlay)} bytes, snapshot is {len(snapshot)} bytes")
    out = bytearray(snapshot)
    for i in range(3, len(overlay), 4):
        if overlay[i]:
            out[i - 3:i + 1] = overlay[i - 3:i + 1]
    return bytes(out)
