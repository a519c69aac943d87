"""
Command-line front end.

Usage examples:
    gifcaption info file.gif
    gifcaption caption file.gif --text "Hello" --x 10 --y 40 --out captioned.gif
    gifcaption overlay file.gif text.png --out captioned.gif
    gifcaption frames file.gif --out frame_%03d.png
"""
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List

from PIL import Image

from .blocks import GIF, parse_gif
from .errors import GifError
from .state import AnimationState
from .text import DEFAULT_FONT_SIZE, TextOverlay

logger = logging.getLogger(__name__)

DISPOSAL_NAMES = {
    0: "None (keep)", 1: "Keep", 2: "Restore to BG", 3: "Restore to previous",
}

# -----------------------------
# Actions
# -----------------------------

def action_info(gif: GIF) -> None:
    ls = gif.ls
    print("Header:")
    print(f"  Version: {gif.version}")
    print(f"  Canvas: {ls.width}x{ls.height} pixels (logical screen)")
    print(f"  Global Color Table: {'present' if ls.gct_flag else 'absent'}")
    if ls.gct_flag:
        print(f"    Size: {2 ** (ls.gct_size_exp + 1)} colors; Sorted: {ls.sort_flag}")
        print(f"    Background Color Index: {ls.bg_color_index}")
    print(f"  Color Resolution: {ls.color_resolution + 1} bits per primary")
    if ls.pixel_aspect_ratio != 0:
        par = (ls.pixel_aspect_ratio + 15) / 64.0
        print(f"  Pixel Aspect Ratio: {par:.3f} (height/width)")
    else:
        print("  Pixel Aspect Ratio: not specified (assume square)")
    print(f"Frames: {len(gif.images)}")
    if gif.loop_count is not None:
        loops = gif.loop_count
        print(f"  Animation Looping: {'infinite' if loops == 0 else loops}")
    if gif.comments:
        print(f"Comments: {len(gif.comments)}")
        for i, c in enumerate(gif.comments[:3], 1):
            snip = (c[:60] + '…') if len(c) > 60 else c
            print(f"  #{i}: {snip}")
    if gif.plaintexts:
        print(f"Plain Text Extensions: {gif.plaintexts}")

    for i, image in enumerate(gif.images):
        d = image.descriptor
        line = f"Frame {i}: {d.width}x{d.height} at ({d.left},{d.top})"
        if d.interlace:
            line += " interlaced"
        if d.lct_flag:
            line += f", local color table {2 ** (d.lct_size_exp + 1)}"
            if d.sort_flag:
                line += " (sorted)"
        gce = image.gce
        if gce:
            disp = DISPOSAL_NAMES.get(gce.disposal_method, f"Reserved {gce.disposal_method}")
            line += f", delay {gce.delay_cs/100:.2f}s, disposal: {disp}"
            if gce.user_input:
                line += ", waits for user input"
        print(line)


def action_caption(state: AnimationState, args: argparse.Namespace) -> bytes:
    renderer = TextOverlay(args.text, args.x, args.y,
                           font_size=args.font_size, font_family=args.font)
    return state.composite_overlay(state.make_overlay(renderer))


def action_overlay(state: AnimationState, overlay_path: str) -> bytes:
    width, height = state.dimensions()
    with Image.open(overlay_path) as im:
        if im.size != (width, height):
            raise ValueError(f"overlay is {im.width}x{im.height}, animation is {width}x{height}")
        overlay = im.convert("RGBA").tobytes()
    return state.composite_overlay(overlay)


def action_export_frames(state: AnimationState, out_pattern: str) -> None:
    width, height = state.dimensions()
    for i in range(state.snapshot_count()):
        pixels, _, _ = state.snapshot_at_cursor()
        path = out_pattern % i if "%" in out_pattern else out_pattern
        Image.frombytes("RGBA", (width, height), pixels).save(path)
        logger.info("wrote %s", path)
        state.advance()

# -----------------------------
# CLI
# -----------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Caption animated GIFs")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_info = sub.add_parser("info", help="Print header/frame info")
    p_info.add_argument("gif", help="Path to .gif")

    p_cap = sub.add_parser("caption", help="Render text onto every frame")
    p_cap.add_argument("gif")
    p_cap.add_argument("--text", required=True)
    p_cap.add_argument("--x", type=float, default=10.0)
    p_cap.add_argument("--y", type=float, default=40.0, help="Baseline y coordinate")
    p_cap.add_argument("--font-size", type=int, default=DEFAULT_FONT_SIZE)
    p_cap.add_argument("--font", default=None, help="TrueType font file or name")
    p_cap.add_argument("--out", required=True)

    p_ovl = sub.add_parser("overlay", help="Stamp a pre-rendered RGBA image onto every frame")
    p_ovl.add_argument("gif")
    p_ovl.add_argument("overlay", help="Image with the same size as the GIF canvas")
    p_ovl.add_argument("--out", required=True)

    p_frames = sub.add_parser("frames", help="Export composited frames as PNG")
    p_frames.add_argument("gif")
    p_frames.add_argument("--out", required=True, help="Output path; use %%d for frame index")

    return p


def main(argv: List[str]) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        data = Path(args.gif).read_bytes()
        if args.cmd == 'info':
            action_info(parse_gif(data))
            return 0

        state = AnimationState()
        state.process(data)
        if args.cmd == 'caption':
            Path(args.out).write_bytes(action_caption(state, args))
        elif args.cmd == 'overlay':
            Path(args.out).write_bytes(action_overlay(state, args.overlay))
        elif args.cmd == 'frames':
            action_export_frames(state, args.out)
        print(f"Done: {args.out}")
        return 0
    except GifError as e:
        print(f"Error: {e}")
        return 2
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}")
        return 2
    except ValueError as e:
        print(f"Error: {e}")
        return 2


def run() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
