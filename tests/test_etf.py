import numpy as np
import pytest

from visiontools.etf import ETF


def step_image(rows=8, cols=10, edge=5):
    img = np.zeros((rows, cols), dtype=np.int64)
    img[:, edge:] = 255
    return img


def random_image(seed=0, shape=(12, 14)):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=shape)


def unit_or_zero(etf):
    length = np.sqrt(etf.tx ** 2 + etf.ty ** 2)
    return np.all(np.isclose(length, 1.0) | (length == 0.0))


def test_default_field():
    etf = ETF()
    assert etf.shape == (1, 1)
    assert etf.tx[0, 0] == 1.0
    assert etf.ty[0, 0] == 0.0
    assert etf.mag[0, 0] == 1.0
    assert etf.max_grad == 1.0


def test_sized_field_shape():
    etf = ETF(4, 6)
    assert etf.shape == (4, 6)
    assert etf.max_grad == 1.0


def test_invalid_size_raises():
    with pytest.raises(ValueError):
        ETF(0, 3)


def test_set_step_edge_tangent_is_along_edge():
    etf = ETF()
    etf.set(step_image())
    # Gradient points across columns, so the tangent runs along the rows.
    assert np.allclose(etf.tx[1:-1, 4], -1.0)
    assert np.allclose(etf.ty[1:-1, 4], 0.0)
    assert np.allclose(etf.tx[1:-1, 5], -1.0)


def test_set_adopts_image_shape_and_normalises_magnitude():
    etf = ETF()
    etf.set(random_image())
    assert etf.shape == (12, 14)
    assert etf.mag.max() == pytest.approx(1.0)
    assert etf.mag.min() >= 0.0
    assert unit_or_zero(etf)


def test_set_fills_border_from_neighbours():
    etf = ETF()
    etf.set(random_image(3))
    assert np.array_equal(etf.mag[1:-1, 0], etf.mag[1:-1, 1])
    assert np.array_equal(etf.mag[1:-1, -1], etf.mag[1:-1, -2])
    assert np.array_equal(etf.mag[0, 1:-1], etf.mag[1, 1:-1])
    assert np.array_equal(etf.mag[-1, 1:-1], etf.mag[-2, 1:-1])
    assert etf.mag[0, 0] == pytest.approx((etf.mag[0, 1] + etf.mag[1, 0]) / 2)


def test_set_flat_image_has_zero_tangents():
    etf = ETF()
    etf.set(np.full((5, 5), 100))
    assert np.all(etf.tx == 0.0)
    assert np.all(etf.ty == 0.0)


def test_set_rejects_small_image():
    with pytest.raises(ValueError):
        ETF().set(np.zeros((2, 5)))


def test_set_rejects_non_2d_image():
    with pytest.raises(ValueError):
        ETF().set(np.zeros((4, 4, 3)))


def test_set2_produces_unit_tangents():
    etf = ETF()
    etf.set2(step_image())
    assert etf.shape == (8, 10)
    assert unit_or_zero(etf)
    assert etf.mag.max() == pytest.approx(1.0)


def test_set2_flat_image_has_zero_tangents():
    etf = ETF()
    etf.set2(np.zeros((6, 6)))
    assert np.all(etf.tx == 0.0)
    assert np.all(etf.ty == 0.0)


def test_normalize_makes_unit_vectors():
    etf = ETF(2, 2)
    etf.tx = np.array([[3.0, 0.0], [1.0, 2.0]])
    etf.ty = np.array([[4.0, 0.0], [1.0, 0.0]])
    etf.mag = np.array([[2.0, 4.0], [1.0, 0.0]])
    etf.max_grad = 4.0
    etf.normalize()
    assert etf.tx[0, 0] == pytest.approx(0.6)
    assert etf.ty[0, 0] == pytest.approx(0.8)
    assert etf.tx[0, 1] == 0.0 and etf.ty[0, 1] == 0.0
    assert np.allclose(etf.mag, [[0.5, 1.0], [0.25, 0.0]])


def test_smooth_keeps_unit_length_and_magnitude():
    etf = ETF()
    etf.set(random_image(7))
    mag_before = etf.mag.copy()
    etf.smooth(2, 3)
    assert unit_or_zero(etf)
    assert np.array_equal(etf.mag, mag_before)


def test_smooth_uniform_field_is_unchanged():
    etf = ETF(5, 5)
    etf.tx = np.full((5, 5), 0.6)
    etf.ty = np.full((5, 5), 0.8)
    etf.mag = np.ones((5, 5))
    etf.smooth(2, 2)
    assert np.allclose(etf.tx, 0.6)
    assert np.allclose(etf.ty, 0.8)


def test_smooth_zero_iterations_is_noop():
    etf = ETF()
    etf.set(random_image(1))
    before = etf.copy()
    etf.smooth(3, 0)
    assert np.array_equal(etf.tx, before.tx)
    assert np.array_equal(etf.ty, before.ty)


def test_smooth_aligns_opposite_neighbours():
    etf = ETF(1, 3)
    etf.tx = np.array([[1.0, -1.0, 1.0]])
    etf.ty = np.zeros((1, 3))
    etf.mag = np.ones((1, 3))
    etf.smooth(1, 1)
    # Opposite vectors are flipped before averaging, so direction is kept.
    assert np.allclose(np.abs(etf.tx), 1.0)
    assert etf.tx[0, 1] == pytest.approx(-1.0)


def test_copy_is_independent():
    etf = ETF()
    etf.set(random_image(5))
    clone = etf.copy()
    assert np.array_equal(clone.tx, etf.tx)
    assert clone.max_grad == etf.max_grad
    clone.tx[0, 0] = 42.0
    assert etf.tx[0, 0] != 42.0