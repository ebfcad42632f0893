"""
Turing Patterns - Entry Point

Usage:
    python -m turing_patterns [image] [options]

Examples:
    python -m turing_patterns
    python -m turing_patterns portrait.jpg
    python -m turing_patterns portrait.jpg --preset maze --size 512
    python -m turing_patterns portrait.jpg --snap 300 --out maze.png

Options:
    --size N          Grid resolution (default 256)
    --iterations N    Steps per frame (default 20)
    --preset KEY      Feed/kill preset (default coral)
    --feed F          Override feed rate
    --kill K          Override kill rate
    --palette NAME    Colour palette instead of black/white threshold
    --backend NAME    numpy (default) or torch
    --snap N          Headless: run N ticks, save PNG, exit
    --out PATH        PNG path for --snap (default turing.png)
    --list            List presets and palettes

Without an image the seed is a single centred disc and the feed is
uniform.
"""

import logging
import sys

from .imaging import ImageSource, disc_bitmap
from .params import ControlledParameters
from .presentation import PALETTES, lut_colorize, threshold_colorize
from .presets import DEFAULT_PRESET, PRESET_ORDER, list_presets
from .session import make_reaction_diffusion_diagram


def build_diagram(image=None, size=256, iterations=20, preset=DEFAULT_PRESET,
                  feed=None, kill=None, palette=None, backend="numpy"):
    """Assemble diagram, controls and image source from CLI options."""
    controls = ControlledParameters(preset)
    controls.set(feed=feed, kill=kill)
    if feed is not None or kill is not None:
        controls.preset_key = None

    source = ImageSource(size)
    if image is not None:
        source.load(image)
        initial_bitmap = source.bitmap()
        feed_mask = source.edges
    else:
        initial_bitmap = disc_bitmap()
        feed_mask = None

    colorize = threshold_colorize if palette is None else lut_colorize(palette)
    diagram = make_reaction_diffusion_diagram(
        {
            "size": size,
            "iterations_per_tick": iterations,
            "initial_bitmap": initial_bitmap,
            "colorize": colorize,
            "feed_mask": feed_mask,
            "backend": backend,
        },
        controls,
    )
    return diagram, controls, source


def snap(diagram, ticks, out_path):
    """Headless mode: run N ticks, save PNG."""
    from PIL import Image

    print(f"  running {ticks} ticks...", end="", flush=True)
    frame = diagram.advance(ticks)
    Image.fromarray(frame).save(out_path)
    print(f" saved: {out_path}")


def main(argv=None):
    image = None
    opts = {}
    snap_ticks = 0
    out_path = "turing.png"

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--size" and i + 1 < len(args):
            opts["size"] = int(args[i + 1])
            i += 2
        elif arg == "--iterations" and i + 1 < len(args):
            opts["iterations"] = int(args[i + 1])
            i += 2
        elif arg == "--preset" and i + 1 < len(args):
            if args[i + 1] not in PRESET_ORDER:
                print(f"Unknown preset: {args[i + 1]}")
                print("Use --list to see available presets")
                return 2
            opts["preset"] = args[i + 1]
            i += 2
        elif arg == "--feed" and i + 1 < len(args):
            opts["feed"] = float(args[i + 1])
            i += 2
        elif arg == "--kill" and i + 1 < len(args):
            opts["kill"] = float(args[i + 1])
            i += 2
        elif arg == "--palette" and i + 1 < len(args):
            if args[i + 1] not in PALETTES:
                print(f"Unknown palette: {args[i + 1]}")
                return 2
            opts["palette"] = args[i + 1]
            i += 2
        elif arg == "--backend" and i + 1 < len(args):
            opts["backend"] = args[i + 1]
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_ticks = int(args[i + 1])
            i += 2
        elif arg == "--out" and i + 1 < len(args):
            out_path = args[i + 1]
            i += 2
        elif arg == "--list":
            print("\nAvailable presets:")
            for key, name, desc in list_presets():
                print(f"    {key:14s} {name:14s} {desc}")
            print("\nPalettes: " + ", ".join(sorted(PALETTES)))
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif not arg.startswith("--") and image is None:
            image = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --help for usage")
            return 2

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    diagram, controls, source = build_diagram(image=image, **opts)

    if snap_ticks > 0:
        print(f"Headless snap mode: {image or '<disc>'} @ "
              f"{diagram.size}x{diagram.size}, {snap_ticks} ticks")
        snap(diagram, snap_ticks, out_path)
        return 0

    from .viewer import Viewer

    print("Starting Turing Patterns Viewer")
    print(f"  Image: {image or '<disc>'}")
    print(f"  Preset: {controls.preset_key}")
    print(f"  Sim size: {diagram.size}x{diagram.size}")
    print()
    Viewer(diagram, controls, image_source=source).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
