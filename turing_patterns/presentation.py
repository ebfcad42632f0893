"""
Presentation Stage

Maps the two-channel concentration field to display colour. A colorize
function takes the A and B arrays and returns an (H, W, 3) float RGB
array; the Presenter clamps it to [0, 1] and converts to uint8. This is
the only place values are clamped.

Palettes are (256, 3) uint8 lookup tables built from colour stops.
"""

import numpy as np


def build_palette(stops, n=256):
    """
    Build a palette by smoothstep interpolation between colour stops.

    Args:
        stops: List of (position, (r, g, b)), positions ascending in [0, 1]
        n: Number of entries in the LUT
    """
    pos = np.array([p for p, _ in stops], dtype=np.float64)
    rgb = np.array([c for _, c in stops], dtype=np.float64)
    t = np.linspace(0.0, 1.0, n)

    seg = np.clip(np.searchsorted(pos, t, side="right") - 1, 0, len(pos) - 2)
    lo, hi = pos[seg], pos[seg + 1]
    span = hi - lo
    frac = np.divide(t - lo, span, out=np.zeros_like(t), where=span > 0)
    frac = np.clip(frac, 0.0, 1.0)
    frac = frac * frac * (3 - 2 * frac)  # smoothstep

    out = rgb[seg] + frac[:, None] * (rgb[seg + 1] - rgb[seg])
    return np.clip(out, 0, 255).astype(np.uint8)


PALETTES = {
    # Paper and ink: low A (pattern) prints dark
    "ink": build_palette([
        (0.00, (12, 10, 14)),
        (0.45, (40, 36, 44)),
        (0.60, (215, 208, 196)),
        (1.00, (246, 242, 232)),
    ]),
    "neon_bio": build_palette([
        (0.00, (5, 2, 8)),
        (0.15, (70, 35, 10)),
        (0.30, (20, 180, 80)),
        (0.45, (30, 220, 140)),
        (0.55, (140, 40, 180)),
        (0.70, (220, 25, 60)),
        (1.00, (255, 130, 160)),
    ]),
    "ocean": build_palette([
        (0.00, (2, 6, 20)),
        (0.35, (10, 60, 110)),
        (0.65, (40, 160, 190)),
        (1.00, (220, 245, 250)),
    ]),
}


def threshold_colorize(a, b, level=0.5):
    """Black/white: white where A <= level."""
    white = (a <= level).astype(np.float32)
    return np.stack([white, white, white], axis=-1)


def lut_colorize(lut, channel="a"):
    """Colorize one channel through a palette.

    Args:
        lut: (N, 3) uint8 palette, or a key of PALETTES
        channel: "a" or "b"
    """
    if isinstance(lut, str):
        lut = PALETTES[lut]
    table = np.asarray(lut, dtype=np.float32) / 255.0
    top = len(table) - 1
    if channel not in ("a", "b"):
        raise ValueError(f"channel must be 'a' or 'b', got {channel!r}")

    def colorize(a, b):
        v = a if channel == "a" else b
        idx = np.rint(np.clip(v, 0.0, 1.0) * top).astype(np.intp)
        return table[idx]
    return colorize


class Presenter:
    """Turns the read buffer into an RGB frame."""

    def __init__(self, colorize=threshold_colorize):
        self.colorize = colorize

    def render(self, field):
        """(2, H, W) host array -> (H, W, 3) uint8."""
        field = np.asarray(field, dtype=np.float32)
        h, w = field.shape[1:]
        rgb = np.asarray(self.colorize(field[0], field[1]), dtype=np.float32)
        if rgb.shape != (h, w, 3):
            raise ValueError(f"colorize returned shape {rgb.shape}, expected {(h, w, 3)}")
        rgb = np.nan_to_num(rgb, nan=0.0)
        np.clip(rgb, 0.0, 1.0, out=rgb)
        return (rgb * 255.0 + 0.5).astype(np.uint8)
