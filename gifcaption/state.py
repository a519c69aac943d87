"""
Animation state: the decoded snapshot sequence plus a playback cursor.

Lifecycle is Empty -> Populated via process(); every later process() call
replaces the whole state. Reads never mutate stored snapshots; compositing
always works on copies.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterator, List, NamedTuple, Tuple

from .canvas import composite_overlay
from .decoder import decode
from .encoder import encode
from .errors import InvalidState

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 100  # centiseconds, reported while empty

OverlayRenderer = Callable[[int, int], bytes]


class Dimensions(NamedTuple):
    width: int
    height: int


class AnimationState:
    def __init__(self) -> None:
        self._snapshots: List[bytes] = []
        self._delays: List[int] = []
        self._width = 0
        self._height = 0
        self._cursor = 0

    # -----------------------------
    # Population
    # -----------------------------

    def process(self, data: bytes) -> None:
        """Decode ``data`` and replace the current state.

        The new sequence is committed only after a complete decode, so a
        failure leaves the previous state intact.
        """
        decoded = decode(data)
        self._snapshots = decoded.snapshots
        self._delays = decoded.delays
        self._width = decoded.width
        self._height = decoded.height
        self._cursor = 0
        logger.info("loaded %dx%d animation with %d frames",
                    decoded.width, decoded.height, len(decoded.snapshots))

    # -----------------------------
    # Playback
    # -----------------------------

    def snapshot_count(self) -> int:
        return len(self._snapshots)

    def is_empty(self) -> bool:
        return not self._snapshots

    @property
    def cursor(self) -> int:
        return self._cursor

    def dimensions(self) -> Dimensions:
        return Dimensions(self._width, self._height)

    def delays(self) -> List[int]:
        return list(self._delays)

    def current_delay(self) -> int:
        if not self._delays:
            return DEFAULT_DELAY
        return self._delays[self._cursor]

    def advance(self) -> None:
        if self._snapshots:
            self._cursor = (self._cursor + 1) % len(self._snapshots)

    advance_cursor = advance

    def snapshot_at_cursor(self) -> Tuple[bytes, int, int]:
        if not self._snapshots:
            raise InvalidState("No frames to render")
        return self._snapshots[self._cursor], self._width, self._height

    def frames(self) -> Iterator[Tuple[bytes, int]]:
        return iter(zip(self._snapshots, self._delays))

    # -----------------------------
    # Overlay & output
    # -----------------------------

    def blank_overlay(self) -> bytes:
        return bytes(self._width * self._height * 4)

    def make_overlay(self, renderer: OverlayRenderer) -> bytes:
        """Ask ``renderer`` for an RGBA buffer the size of the animation."""
        if not self._snapshots:
            raise InvalidState("No frames to caption")
        overlay = renderer(self._width, self._height)
        expected = self._width * self._height * 4
        if len(overlay) != expected:
            raise ValueError(f"renderer returned {len(overlay)} bytes, expected {expected}")
        return overlay

    def composite_overlay(self, overlay: bytes) -> bytes:
        """Stamp ``overlay`` onto every frame and encode the result as a GIF."""
        if not self._snapshots:
            raise InvalidState("No frames to process")
        composited = [composite_overlay(snapshot, overlay) for snapshot in self._snapshots]
        return encode(composited, self._delays, self._width, self._height)

    def encode(self) -> bytes:
        if not self._snapshots:
            raise InvalidState("No frames to process")
        return encode(self._snapshots, self._delays, self._width, self._height)


GifProcessor = AnimationState
