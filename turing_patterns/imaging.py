"""
Image Preprocessing

Turns a picture into the two scalar fields the diagram consumes:

  luminance  - grayscale in [0, 1], the seed for channel A
  edge map   - luminance sharpened by its discrete laplacian, used as
               the feed mask so patterns grow along the outlines

See https://homepages.inf.ed.ac.uk/rbf/HIPR2/log.htm for the
laplacian kernel.
"""

import logging
import numpy as np
from PIL import Image
from scipy.ndimage import convolve

logger = logging.getLogger(__name__)

RED_WEIGHT = 0.299
GREEN_WEIGHT = 0.587
BLUE_WEIGHT = 0.114

LAPLACIAN_KERNEL = np.array([
    [0, -1, 0],
    [-1, 4, -1],
    [0, -1, 0],
], dtype=np.float32)


def load_luminance(source, size):
    """Load an image (path or PIL image), stretch to size x size, grayscale.

    Returns:
        (size, size) float32 array in [0, 1]
    """
    img = source if isinstance(source, Image.Image) else Image.open(source)
    rgb = img.convert("RGB").resize((size, size), Image.BILINEAR)
    px = np.asarray(rgb, dtype=np.float32)
    lum = RED_WEIGHT * px[..., 0] + GREEN_WEIGHT * px[..., 1] + BLUE_WEIGHT * px[..., 2]
    return (lum / 255.0).astype(np.float32)


def enhance_edges(data, size):
    """Sharpen by adding the laplacian; interior pixels only.

    The one-pixel border stays 0. Output is clamped to [0, 1]. Input
    whose length is not size*size yields an all-zero field.
    """
    flat = np.asarray(data, dtype=np.float32).reshape(-1)
    if flat.size != size * size:
        logger.error("enhance_edges: data has %d values, expected %dx%d",
                     flat.size, size, size)
        return np.zeros((size, size), dtype=np.float32)

    field = flat.reshape(size, size)
    out = np.zeros_like(field)
    if size < 3:
        return out
    edge = convolve(field, LAPLACIAN_KERNEL, mode="constant", cval=0.0)
    out[1:-1, 1:-1] = np.clip(field[1:-1, 1:-1] + edge[1:-1, 1:-1], 0.0, 1.0)
    return out


def image_bitmap(field, catalyst=None):
    """initial_bitmap procedure painting ``field`` (read at draw time).

    ``catalyst`` optionally seeds channel B; without it B starts at 0.
    """
    def paint(surface):
        surface.put_field(field, catalyst)
    return paint


def disc_bitmap(radius=0.08):
    """initial_bitmap procedure: full substrate, catalyst in a centred disc."""
    def paint(surface):
        surface.fill_rect(-1.0, -1.0, 1.0, 1.0, value=1.0)
        surface.fill_circle(0.0, 0.0, radius, value=0.5, catalyst=0.25)
    return paint


class ImageSource:
    """Luminance and edge map for the current picture.

    load() refreshes both arrays in place, so procedures built with
    image_bitmap(self.luminance) see the new picture on their next call.
    """

    def __init__(self, size, source=None):
        self.size = size
        self.luminance = np.zeros((size, size), dtype=np.float32)
        self.edges = np.zeros((size, size), dtype=np.float32)
        self.path = None
        if source is not None:
            self.load(source)

    def load(self, source):
        lum = load_luminance(source, self.size)
        self.luminance[:] = lum
        self.edges[:] = enhance_edges(lum, self.size)
        self.path = None if isinstance(source, Image.Image) else str(source)
        logger.info("loaded image %s at %dx%d", self.path or "<image>", self.size, self.size)

    def bitmap(self):
        """Seed with A = B = luminance, as a gray canvas texel carries it."""
        return image_bitmap(self.luminance, catalyst=self.luminance)
