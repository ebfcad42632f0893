"""
Array Backends for the Stencil Solver

The whole grid is updated with array operations, one call per neighbour
offset, instead of a per-pixel shader. A backend supplies allocation,
host transfer and bilinear wrap-around sampling; the arithmetic of the
Gray-Scott step is written once against numpy/torch operator syntax.

  numpy  - scipy.ndimage.shift (order=1, mode="grid-wrap") on the CPU
  torch  - fractional torch.roll blends, runs on CUDA/MPS when present

Sampling convention: sample(field, dy, dx) returns, for every cell
(y, x), the value found at (y + dy, x + dx) on the torus. Offsets are in
grid cells and may be fractional.
"""

import math
import numpy as np
from scipy.ndimage import shift as _ndi_shift

from .errors import ConfigurationError


class NumpyBackend:
    """CPU backend: float32 numpy arrays."""

    name = "numpy"

    def zeros(self, shape):
        return np.zeros(shape, dtype=np.float32)

    def ones(self, shape):
        return np.ones(shape, dtype=np.float32)

    def asarray(self, data):
        return np.ascontiguousarray(data, dtype=np.float32)

    def to_numpy(self, array):
        return np.array(array, dtype=np.float32, copy=True)

    def copy_into(self, dst, src):
        dst[...] = src

    def where(self, condition, a, b):
        return np.where(condition, a, b).astype(np.float32, copy=False)

    def sample(self, field, dy, dx):
        """Bilinear sample at (y + dy, x + dx) with toroidal addressing.

        Leading axes (channels) are left untouched.
        """
        if dy == 0 and dx == 0:
            return field
        offsets = (0,) * (field.ndim - 2) + (-dy, -dx)
        return _ndi_shift(field, offsets, order=1, mode="grid-wrap")


class TorchBackend:
    """GPU backend: float32 torch tensors on ``device``.

    Picks CUDA, then MPS, then CPU when no device is given.
    """

    name = "torch"

    def __init__(self, device=None):
        try:
            import torch
        except ImportError as e:
            raise ConfigurationError(
                "torch backend requested but torch is not installed "
                "(pip install 'turing-patterns[gpu]')"
            ) from e
        self._torch = torch
        if device is None:
            if torch.cuda.is_available():
                device = "cuda"
            elif getattr(torch.backends, "mps", None) and torch.backends.mps.is_available():
                device = "mps"
            else:
                device = "cpu"
        self.device = torch.device(device)

    def zeros(self, shape):
        return self._torch.zeros(shape, dtype=self._torch.float32, device=self.device)

    def ones(self, shape):
        return self._torch.ones(shape, dtype=self._torch.float32, device=self.device)

    def asarray(self, data):
        if isinstance(data, self._torch.Tensor):
            return data.to(device=self.device, dtype=self._torch.float32)
        host = np.ascontiguousarray(data, dtype=np.float32)
        return self._torch.from_numpy(host).to(self.device)

    def to_numpy(self, array):
        return array.detach().cpu().numpy().astype(np.float32, copy=True)

    def copy_into(self, dst, src):
        dst.copy_(src)

    def where(self, condition, a, b):
        return self._torch.where(condition, a, b)

    def sample(self, field, dy, dx):
        """Bilinear sample at (y + dy, x + dx) with toroidal addressing.

        Separable: blend along x, then along y. Four rolls per offset
        at most, two when the offset is integral.
        """
        out = self._shift_axis(field, dx, -1)
        return self._shift_axis(out, dy, -2)

    def _shift_axis(self, field, offset, dim):
        whole = math.floor(offset)
        frac = offset - whole
        base = self._torch.roll(field, shifts=-whole, dims=dim) if whole else field
        if frac == 0:
            return base
        nxt = self._torch.roll(field, shifts=-(whole + 1), dims=dim)
        return base * (1.0 - frac) + nxt * frac


BACKENDS = {
    "numpy": NumpyBackend,
    "torch": TorchBackend,
}


def get_backend(name="numpy", device=None):
    """Instantiate a backend by name."""
    if name not in BACKENDS:
        raise ConfigurationError(
            f"Unknown backend: {name!r}. Available: {sorted(BACKENDS)}")
    if name == "torch":
        return TorchBackend(device)
    return NumpyBackend()
