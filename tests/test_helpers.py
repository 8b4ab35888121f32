import math

import numpy as np
import pytest

from visiontools.helpers import (
    find_first,
    find_last,
    force_odd,
    get_max_val,
    make_matrix,
    rodrigues,
    thin,
    thinning_iteration,
    weighted_average_angle,
)


def test_rodrigues_zero_vector_is_identity():
    assert np.allclose(rodrigues([0.0, 0.0, 0.0]), np.eye(3))


def test_rodrigues_quarter_turn_about_z_maps_x_to_y():
    rot = rodrigues([0.0, 0.0, math.pi / 2])
    assert np.allclose(rot @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])


def test_rodrigues_is_orthonormal():
    rot = rodrigues([[0.3], [-1.2], [0.7]])
    assert np.allclose(rot @ rot.T, np.eye(3))
    assert np.isclose(np.linalg.det(rot), 1.0)


def test_rodrigues_rejects_bad_size():
    with pytest.raises(ValueError):
        rodrigues([1.0, 2.0])


def test_make_matrix_layout():
    rot = rodrigues([0.1, 0.2, 0.3])
    t = [4.0, 5.0, 6.0]
    m = make_matrix(rot, t)
    assert np.allclose(m[:3, :3], rot.T)
    assert np.allclose(m[3, :3], t)
    assert np.allclose(m[:3, 3], 0.0)
    assert m[3, 3] == 1.0


def test_make_matrix_accepts_rotation_vector():
    rvec = [0.5, -0.2, 0.1]
    assert np.allclose(make_matrix(rvec, [1, 2, 3]), make_matrix(rodrigues(rvec), [1, 2, 3]))


def test_make_matrix_transforms_row_vectors():
    rot = rodrigues([0.0, 0.0, math.pi / 2])
    m = make_matrix(rot, [1.0, 0.0, 0.0])
    p = np.array([1.0, 0.0, 0.0, 1.0]) @ m
    assert np.allclose(p[:3], rot @ np.array([1.0, 0.0, 0.0]) + [1.0, 0.0, 0.0])


def test_force_odd_non_negative():
    for x in range(20):
        result = force_odd(x)
        assert result % 2 == 1
        assert result in (x, x + 1)


def test_force_odd_truncates_toward_zero():
    assert force_odd(-3) == -1


def test_find_first_and_last():
    arr = np.array([0, 3, 5, 3], dtype=np.uint8)
    assert find_first(arr, 3) == 1
    assert find_last(arr, 3) == 3


def test_find_missing_gives_zero():
    arr = np.array([1, 2, 4], dtype=np.uint8)
    assert find_first(arr, 9) == 0
    assert find_last(arr, 9) == 0


def test_weighted_average_angle_single_lines():
    assert weighted_average_angle([(0, 0, 5, 0)]) == pytest.approx(0.0)
    assert weighted_average_angle([(0, 0, 0, 5)]) == pytest.approx(math.pi / 2)


def test_weighted_average_angle_equal_weights():
    result = weighted_average_angle([(0, 0, 3, 0), (0, 0, 0, 3)])
    assert result == pytest.approx(math.pi / 4)


def test_weighted_average_angle_longer_line_dominates():
    result = weighted_average_angle([(0, 0, 10, 0), (0, 0, 0, 1)])
    assert 0.0 < result < math.pi / 4


def test_weighted_average_angle_empty_raises():
    with pytest.raises(ValueError):
        weighted_average_angle([])


def test_thinning_iteration_keeps_isolated_pixel():
    img = np.zeros((5, 5), dtype=np.uint8)
    img[2, 2] = 1
    thinned, marker = thinning_iteration(img, 0, np.zeros_like(img))
    assert np.array_equal(thinned, img)
    assert not marker.any()


def test_thinning_iteration_clears_marked_pixels():
    img = np.zeros((5, 5), dtype=np.uint8)
    img[2, 2] = 1
    marker = np.zeros_like(img)
    marker[2, 2] = 1
    thinned, _ = thinning_iteration(img, 1, marker)
    assert not thinned.any()


def test_thinning_iteration_rejects_small_image():
    img = np.zeros((3, 3), dtype=np.uint8)
    with pytest.raises(ValueError):
        thinning_iteration(img, 0, img)


def _bar():
    img = np.zeros((12, 14), dtype=np.uint8)
    img[4:8, 2:12] = 255
    return img


def test_thin_reduces_bar_within_original():
    img = _bar()
    result = thin(img)
    assert set(np.unique(result)) <= {0, 255}
    assert np.all(img[result == 255] == 255)
    assert 0 < np.count_nonzero(result) < np.count_nonzero(img)


def test_thin_is_idempotent():
    once = thin(_bar())
    assert np.array_equal(thin(once), once)


def test_get_max_val():
    assert get_max_val(np.uint8) == 255
    assert get_max_val(np.int16) == 32767
    assert get_max_val(np.float32) == 1
    assert get_max_val(np.zeros(2, dtype=np.uint16)) == 65535