"""
Seed Surface and Seed Loader

The initial_bitmap procedure draws onto a SeedSurface: a size x size
canvas with three planes

  value     grayscale in [0, 1], becomes channel A
  catalyst  becomes channel B; 0 unless the procedure paints it
  alpha     coverage of the paint

A fresh surface is opaque black with no catalyst. Drawing helpers use
the same two coordinate systems a canvas offers: pixel indices for
put_field / put_image, and centred unit coordinates ([-1, 1] across the
surface) for the shape helpers.

The SeedLoader paints a surface into the write buffer, blending over
the committed state with the surface alpha:

    A = A_old * (1 - alpha) + value * alpha
    B = B_old * (1 - alpha) + catalyst * alpha

then commits, so the painted buffer becomes the read buffer.
"""

import logging
import numpy as np
from PIL import Image

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _unit_interval(data):
    """Clamp into [0, 1]; NaN counts as 0 and +inf as 1."""
    return np.clip(np.nan_to_num(data, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)


class SeedSurface:
    """Drawing surface for initial bitmaps."""

    def __init__(self, size):
        self.size = size
        self.value = np.zeros((size, size), dtype=np.float32)
        self.catalyst = np.zeros((size, size), dtype=np.float32)
        self.alpha = np.ones((size, size), dtype=np.float32)
        self._Y, self._X = np.ogrid[:size, :size]

    def clear(self):
        """Reset to opaque black."""
        self.value[:] = 0.0
        self.catalyst[:] = 0.0
        self.alpha[:] = 1.0

    def _as_plane(self, field, name):
        data = np.asarray(field, dtype=np.float32)
        if data.size != self.size * self.size:
            raise ValueError(
                f"{name}: expected {self.size * self.size} values, got {data.size}")
        return _unit_interval(data.reshape(self.size, self.size))

    def put_field(self, field, catalyst=None):
        """Replace every pixel with ``field`` (clamped to [0, 1]), opaque.

        ``catalyst`` optionally paints channel B the same way; it is 0
        otherwise.
        """
        self.value[:] = self._as_plane(field, "put_field")
        if catalyst is None:
            self.catalyst[:] = 0.0
        else:
            self.catalyst[:] = self._as_plane(catalyst, "put_field catalyst")
        self.alpha[:] = 1.0

    def put_image(self, image):
        """Draw a PIL image stretched over the whole surface.

        Luminance goes to the value plane, the image alpha (if any) to
        the alpha plane.
        """
        rgba = image.convert("RGBA").resize((self.size, self.size), Image.BILINEAR)
        px = np.asarray(rgba, dtype=np.float32) / 255.0
        lum = 0.299 * px[..., 0] + 0.587 * px[..., 1] + 0.114 * px[..., 2]
        self.value[:] = _unit_interval(lum)
        self.catalyst[:] = 0.0
        self.alpha[:] = px[..., 3]

    def _unit_coords(self):
        half = self.size / 2.0
        return (self._X + 0.5 - half) / half, (self._Y + 0.5 - half) / half

    def _paint(self, inside, value, catalyst):
        self.value[inside] = _unit_interval(value)
        self.catalyst[inside] = _unit_interval(catalyst)
        self.alpha[inside] = 1.0

    def fill_circle(self, cx, cy, radius, value=1.0, catalyst=0.0):
        """Opaque disc in centred unit coordinates."""
        u, v = self._unit_coords()
        inside = (u - cx) ** 2 + (v - cy) ** 2 <= radius * radius
        self._paint(inside, value, catalyst)

    def fill_rect(self, x0, y0, x1, y1, value=1.0, catalyst=0.0):
        """Opaque rectangle in centred unit coordinates."""
        self._paint(self._rect(x0, y0, x1, y1), value, catalyst)

    def clear_rect(self, x0, y0, x1, y1):
        """Make a rectangle transparent; reseeding keeps the old state there."""
        inside = self._rect(x0, y0, x1, y1)
        self.value[inside] = 0.0
        self.catalyst[inside] = 0.0
        self.alpha[inside] = 0.0

    def _rect(self, x0, y0, x1, y1):
        u, v = self._unit_coords()
        return (u >= min(x0, x1)) & (u <= max(x0, x1)) & (v >= min(y0, y1)) & (v <= max(y0, y1))


class SeedLoader:
    """Paints seed surfaces into a BufferPair."""

    def __init__(self, pair):
        self.pair = pair
        self.backend = pair.backend
        self.seeds = 0

    def seed(self, surface):
        if surface.size != self.pair.size:
            raise ConfigurationError(
                f"seed surface is {surface.size}x{surface.size}, "
                f"grid is {self.pair.size}x{self.pair.size}")
        be = self.backend
        paint = np.stack([_unit_interval(surface.value), _unit_interval(surface.catalyst)])
        paint = be.asarray(paint)
        alpha = be.asarray(_unit_interval(surface.alpha))

        old = self.pair.read()
        # Opaque pixels overwrite outright: 0 * inf in the mix would give nan
        blended = be.where(alpha >= 1.0, paint, old * (1.0 - alpha) + paint * alpha)
        be.copy_into(self.pair.write(), blended)
        self.pair.commit()
        self.seeds += 1
        logger.debug("seeded %dx%d grid (seed #%d)", surface.size, surface.size, self.seeds)
