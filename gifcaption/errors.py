"""Exception hierarchy shared by the decoder, encoder and state layers."""
from __future__ import annotations


class GifError(Exception):
    prefix = "GIF error"

    def __init__(self, cause: str) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.prefix}: {self.cause}"


class DecodeError(GifError):
    """Malformed, truncated or unsupported input."""
    prefix = "GIF decode error"


class EncodeError(GifError):
    """The writer rejected a header, setting or frame."""
    prefix = "GIF encode error"


class CanvasError(GifError):
    """A rendering collaborator could not produce its surface."""
    prefix = "Canvas error"


class InvalidState(GifError):
    """Operation on an empty state, or a decode that produced no frames."""
    prefix = "Invalid state"
