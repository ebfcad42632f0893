"""
Feed Mask

Spatially varying multiplier on the feed rate. The stencil uses
feed * mask[cell]; an absent mask behaves like a mask of ones.

The mask is replaced wholesale. Input of the wrong length is normalised
rather than rejected: extra values are dropped and missing values are
filled with 0.0 (no local feed). NaN and infinite entries also become
0.0. Both repairs log a warning. Input that is not numeric at all
(None, strings, ragged lists) raises ConfigurationError.
"""

import logging
import numpy as np

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PAD_VALUE = 0.0


def normalize_mask(field, size):
    """Return ``field`` as a (size, size) float32 array.

    2D input is flattened row-major first. Never raises for a length
    mismatch; raises ConfigurationError for non-numeric input.
    """
    if field is None:
        raise ConfigurationError("feed mask: got None; use clear() to drop the mask")
    expected = size * size
    try:
        flat = np.asarray(field, dtype=np.float32).reshape(-1)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"feed mask: not numeric ({e})") from e
    if flat.size != expected:
        action = "truncating" if flat.size > expected else f"padding with {PAD_VALUE}"
        logger.warning(
            "feed mask: expected %d elements, got %d; %s",
            expected, flat.size, action)
        fixed = np.full(expected, PAD_VALUE, dtype=np.float32)
        n = min(expected, flat.size)
        fixed[:n] = flat[:n]
        flat = fixed
    bad = ~np.isfinite(flat)
    if bad.any():
        logger.warning(
            "feed mask: %d non-finite values replaced with %s",
            int(bad.sum()), PAD_VALUE)
        flat = np.where(bad, np.float32(PAD_VALUE), flat)
    return flat.reshape(size, size).copy()


class FeedMask:
    """Session-scoped feed-rate mask living on the simulation backend."""

    def __init__(self, size, backend, field=None):
        self.size = size
        self.backend = backend
        self._host = None
        self._values = None
        self._uniform = None
        self.version = 0
        if field is not None:
            self.replace(field)

    @property
    def present(self):
        return self._host is not None

    @property
    def field(self):
        """Host copy of the current mask, or None when absent."""
        return None if self._host is None else self._host.copy()

    def replace(self, field):
        host = normalize_mask(field, self.size)
        self._values = self.backend.asarray(host)
        self._host = host
        self.version += 1
        logger.debug("feed mask replaced (version %d)", self.version)

    def clear(self):
        """Drop the mask; feed becomes uniform."""
        self._host = None
        self._values = None
        self.version += 1

    def values(self):
        """Per-cell multiplier on the backend (ones when absent)."""
        if self._values is not None:
            return self._values
        if self._uniform is None:
            self._uniform = self.backend.ones((self.size, self.size))
        return self._uniform
