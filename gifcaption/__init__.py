"""Decode animated GIFs, stamp an RGBA overlay onto every frame, re-encode."""
from .canvas import DeltaFrame, Disposal, apply_delta, composite_overlay
from .decoder import DecodedAnimation, decode
from .encoder import encode
from .errors import CanvasError, DecodeError, EncodeError, GifError, InvalidState
from .state import DEFAULT_DELAY, AnimationState, Dimensions, GifProcessor
from .text import TextOverlay

__version__ = "0.1.0"

__all__ = [
    "AnimationState",
    "CanvasError",
    "DEFAULT_DELAY",
    "DecodeError",
    "DecodedAnimation",
    "DeltaFrame",
    "Dimensions",
    "Disposal",
    "EncodeError",
    "GifError",
    "GifProcessor",
    "InvalidState",
    "TextOverlay",
    "apply_delta",
    "composite_overlay",
    "decode",
    "encode",
]
