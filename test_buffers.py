"""Buffer pair roles, allocation failures and feed-mask normalisation."""

import logging

import numpy as np
import pytest

from turing_patterns.backends import NumpyBackend, get_backend
from turing_patterns.buffers import BufferPair, BufferRole
from turing_patterns.errors import AllocationError, ConfigurationError
from turing_patterns.mask import FeedMask, normalize_mask


class _ExhaustedBackend(NumpyBackend):
    def zeros(self, shape):
        raise MemoryError("out of memory")


def test_roles_alternate_on_commit():
    pair = BufferPair(8, NumpyBackend())
    assert pair.role_of(0) is BufferRole.READ
    assert pair.role_of(1) is BufferRole.WRITE

    first_read = pair.read()
    first_write = pair.write()
    assert first_read is not first_write, "read and write must be different buffers"

    pair.commit()
    assert pair.read() is first_write
    assert pair.write() is first_read
    assert pair.role_of(0) is BufferRole.WRITE
    assert pair.commits == 1

    pair.commit()
    assert pair.read() is first_read
    assert pair.read() is not pair.write()


def test_buffers_shape_and_dtype():
    pair = BufferPair(16, NumpyBackend())
    for buf in pair.buffers():
        assert buf.shape == (2, 16, 16)
        assert buf.dtype == np.float32
        assert not buf.any()


def test_snapshot_is_a_copy():
    pair = BufferPair(4, NumpyBackend())
    snap = pair.snapshot()
    snap[:] = 5.0
    assert not pair.read().any(), "snapshot must not alias the live buffer"


@pytest.mark.parametrize("size", [0, -3, 2.5, "8", None])
def test_invalid_size_is_configuration_error(size):
    with pytest.raises(ConfigurationError):
        BufferPair(size, NumpyBackend())


def test_allocation_failure_is_fatal():
    with pytest.raises(AllocationError):
        BufferPair(8, _ExhaustedBackend())


def test_unknown_backend():
    with pytest.raises(ConfigurationError):
        get_backend("opengl")


# ---------------------------------------------------------------------------
# Feed mask
# ---------------------------------------------------------------------------

def test_normalize_exact_length_untouched():
    field = np.arange(16, dtype=np.float32) / 16
    out = normalize_mask(field, 4)
    assert out.shape == (4, 4)
    assert np.array_equal(out.reshape(-1), field)


def test_normalize_truncates_long_input(caplog):
    with caplog.at_level(logging.WARNING, logger="turing_patterns.mask"):
        out = normalize_mask(np.ones(20), 4)
    assert out.size == 16
    assert np.all(out == 1.0)
    assert "expected 16 elements, got 20" in caplog.text


def test_normalize_pads_short_input_with_zero(caplog):
    with caplog.at_level(logging.WARNING, logger="turing_patterns.mask"):
        out = normalize_mask(np.full(10, 0.5), 4)
    flat = out.reshape(-1)
    assert flat.size == 16
    assert np.all(flat[:10] == 0.5)
    assert np.all(flat[10:] == 0.0), "padding means no local feed"
    assert "got 10" in caplog.text


def test_normalize_accepts_2d_and_empty():
    grid = np.full((4, 4), 0.25)
    assert np.all(normalize_mask(grid, 4) == 0.25)
    assert np.all(normalize_mask([], 3) == 0.0)


def test_feed_mask_absent_is_uniform_ones():
    mask = FeedMask(5, NumpyBackend())
    assert not mask.present
    assert mask.field is None
    assert np.all(mask.values() == 1.0)
    assert mask.values().shape == (5, 5)


def test_feed_mask_replace_and_clear():
    mask = FeedMask(4, NumpyBackend(), np.zeros(16))
    assert mask.present
    v0 = mask.version
    mask.replace(np.full(3, 0.7))
    assert mask.version == v0 + 1
    assert mask.values().shape == (4, 4)
    assert mask.values()[0, 0] == pytest.approx(0.7)
    assert mask.values()[3, 3] == 0.0

    field = mask.field
    field[:] = 9.0
    assert mask.values().max() < 1.0, "field property returns a copy"

    mask.clear()
    assert not mask.present
    assert np.all(mask.values() == 1.0)


@pytest.mark.parametrize("bad", [None, "ones", [[1.0, 2.0], [3.0]], {"a": 1}])
def test_non_numeric_mask_rejected(bad):
    with pytest.raises(ConfigurationError):
        normalize_mask(bad, 4)
    mask = FeedMask(4, NumpyBackend(), np.full(16, 0.5))
    with pytest.raises(ConfigurationError):
        mask.replace(bad)
    assert np.all(mask.values() == 0.5), "rejected input leaves the old mask in place"


def test_non_finite_mask_values_zeroed(caplog):
    field = np.full(16, 0.5)
    field[[0, 5, 9]] = [np.nan, np.inf, -np.inf]
    with caplog.at_level(logging.WARNING, logger="turing_patterns.mask"):
        out = normalize_mask(field, 4).reshape(-1)
    assert np.isfinite(out).all()
    assert out[0] == out[5] == out[9] == 0.0
    assert np.all(np.delete(out, [0, 5, 9]) == 0.5)
    assert "3 non-finite" in caplog.text
