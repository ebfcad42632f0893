#!/usr/bin/env python3
"""
Tests for the Gray-Scott stencil step.

Verifies:
1. One step from a single seeded cell (size 4) spreads A with the
   cardinal/diagonal weights and leaves B at zero
2. Toroidal wrap-around at the grid edge
3. The weighted laplacian conserves mass and vanishes on constants
4. Fractional diffusion_step samples bilinearly
5. The step is pure: input untouched, no aliasing
6. Torch backend matches numpy (when torch is installed)
"""

import numpy as np
import pytest

from turing_patterns.backends import NumpyBackend
from turing_patterns.config import StepParams
from turing_patterns.stencil import gray_scott_step, weighted_laplacian

PARAMS = StepParams(diffusion_rate=0.7, diffusion_step=1.0, feed=0.03, kill=0.06)
CARDINAL = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIAGONAL = [(-1, -1), (-1, 1), (1, -1), (1, 1)]


def _state(size, cells, b_cells=None):
    field = np.zeros((2, size, size), dtype=np.float32)
    for (y, x), a in cells.items():
        field[0, y, x] = a
    for (y, x), b in (b_cells or {}).items():
        field[1, y, x] = b
    return field


def _step(read, params=PARAMS, mask=None):
    be = NumpyBackend()
    size = read.shape[1]
    out = be.zeros(read.shape)
    if mask is None:
        mask = be.ones((size, size))
    return gray_scott_step(read, out, mask, params, be)


def test_single_cell_spreads_to_neighbours():
    """Seeded interior cell: cardinals gain 0.7*0.2, diagonals 0.7*0.05."""
    read = _state(4, {(1, 1): 1.0})
    out = _step(read)
    feed = 0.03

    for dy, dx in CARDINAL:
        val = out[0, 1 + dy, 1 + dx]
        assert abs(val - (0.7 * 0.2 + feed)) < 1e-6, f"cardinal {(dy, dx)}: {val}"
    for dy, dx in DIAGONAL:
        val = out[0, 1 + dy, 1 + dx]
        assert abs(val - (0.7 * 0.05 + feed)) < 1e-6, f"diagonal {(dy, dx)}: {val}"

    # Center loses 0.7 * 1.0 to diffusion, no feed because A = 1
    assert abs(out[0, 1, 1] - 0.3) < 1e-6, f"center: {out[0, 1, 1]}"

    # Cells two away only see the feed term
    far = [(y, x) for y in range(4) for x in range(4) if y == 3 or x == 3]
    for y, x in far:
        assert abs(out[0, y, x] - feed) < 1e-6, f"far cell {(y, x)}: {out[0, y, x]}"

    assert np.all(out[1] == 0.0), "B must stay 0 when no cell has B"


def test_wraparound_left_edge_reaches_right_edge():
    size = 5
    params = StepParams(diffusion_rate=0.7, diffusion_step=1.0, feed=0.0, kill=0.0)
    read = _state(size, {(2, 0): 1.0})
    out = _step(read, params)

    assert abs(out[0, 2, size - 1] - 0.7 * 0.2) < 1e-6, "west neighbour across the edge"
    assert abs(out[0, 1, size - 1] - 0.7 * 0.05) < 1e-6, "diagonal across the edge"
    assert abs(out[0, 3, size - 1] - 0.7 * 0.05) < 1e-6, "diagonal across the edge"
    assert out[0, 2, 2] == 0.0, "two cells away gets nothing"


def test_wraparound_corner():
    params = StepParams(diffusion_rate=1.0, diffusion_step=1.0, feed=0.0, kill=0.0)
    read = _state(6, {(0, 0): 1.0})
    out = _step(read, params)
    assert abs(out[0, 5, 5] - 0.05) < 1e-6, f"opposite corner: {out[0, 5, 5]}"
    assert abs(out[0, 0, 5] - 0.2) < 1e-6
    assert abs(out[0, 5, 0] - 0.2) < 1e-6


def test_laplacian_conserves_mass_and_kills_constants():
    be = NumpyBackend()
    rng = np.random.default_rng(7)
    field = rng.random((2, 16, 16)).astype(np.float32)
    lap = weighted_laplacian(field, 1.0, be)
    assert abs(float(lap.sum())) < 1e-3, f"laplacian should sum to ~0: {lap.sum()}"

    flat = np.full((2, 8, 8), 0.3, dtype=np.float32)
    lap = weighted_laplacian(flat, 1.0, be)
    assert np.allclose(lap, 0.0, atol=1e-6)


def test_fractional_step_is_bilinear():
    """Half-cell step: each cardinal sample is half self, half neighbour."""
    be = NumpyBackend()
    field = _state(6, {(2, 2): 1.0})
    lap = weighted_laplacian(field, 0.5, be)
    # cardinals 4 * 0.5, diagonals 4 * 0.25
    expected = 0.2 * 2.0 + 0.05 * 1.0 - 1.0
    assert abs(lap[0, 2, 2] - expected) < 1e-6, f"center: {lap[0, 2, 2]}"
    # East neighbour samples its west half-way toward the seed
    assert abs(lap[0, 2, 3] - (0.2 * 0.5 + 0.05 * 0.5)) < 1e-6


def test_reaction_and_mask():
    """A*B*B converts A to B; mask scales feed per cell."""
    read = np.zeros((2, 4, 4), dtype=np.float32)
    read[0] = 0.5
    read[1] = 0.5
    mask = np.zeros((4, 4), dtype=np.float32)
    mask[0, 0] = 2.0
    params = StepParams(diffusion_rate=0.0, diffusion_step=1.0, feed=0.04, kill=0.06)
    out = _step(read, params, mask)

    reaction = 0.5 * 0.5 * 0.5
    assert abs(out[0, 1, 1] - (0.5 - reaction)) < 1e-6
    assert abs(out[1, 1, 1] - (0.5 + reaction - 0.06 * 0.5)) < 1e-6
    assert abs(out[0, 0, 0] - (0.5 - reaction + 0.08 * 0.5)) < 1e-6
    assert abs(out[1, 0, 0] - (0.5 + reaction - (0.06 + 0.08) * 0.5)) < 1e-6


def test_no_clamping():
    read = _state(4, {(1, 1): 1.0}, {(1, 1): 1.0})
    params = StepParams(diffusion_rate=0.0, diffusion_step=1.0, feed=0.0, kill=0.0)
    read[0, 1, 1] = 2.0
    out = _step(read, params)
    # A = 2 - 2*1*1 = 0, B = 1 + 2 = 3 stays above 1
    assert abs(out[1, 1, 1] - 3.0) < 1e-6


def test_step_is_pure():
    be = NumpyBackend()
    rng = np.random.default_rng(1)
    read = rng.random((2, 8, 8)).astype(np.float32)
    before = read.copy()
    _step(read)
    assert np.array_equal(read, before), "step must not modify its input"

    with pytest.raises(ValueError):
        gray_scott_step(read, read, be.ones((8, 8)), PARAMS, be)


def test_torch_matches_numpy():
    torch = pytest.importorskip("torch")
    from turing_patterns.backends import TorchBackend

    tb = TorchBackend("cpu")
    nb = NumpyBackend()
    rng = np.random.default_rng(3)
    read = rng.random((2, 12, 12)).astype(np.float32)
    mask = rng.random((12, 12)).astype(np.float32)

    for step in (1.0, 0.7, 1.5):
        params = StepParams(diffusion_rate=0.7, diffusion_step=step, feed=0.05, kill=0.06)
        expected = gray_scott_step(read, nb.zeros(read.shape), mask, params, nb)
        got = gray_scott_step(tb.asarray(read), tb.zeros(read.shape),
                              tb.asarray(mask), params, tb)
        assert isinstance(got, torch.Tensor)
        assert np.allclose(tb.to_numpy(got), expected, atol=1e-5), f"step={step}"


if __name__ == "__main__":
    test_single_cell_spreads_to_neighbours()
    test_wraparound_left_edge_reaches_right_edge()
    test_wraparound_corner()
    test_laplacian_conserves_mass_and_kills_constants()
    test_fractional_step_is_bilinear()
    test_reaction_and_mask()
    test_no_clamping()
    test_step_is_pure()
    print("\n✓ All stencil tests passed!\n")
