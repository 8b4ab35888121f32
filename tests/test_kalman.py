import numpy as np
import pytest

from visiontools.kalman import KalmanEuler, KalmanPosition


def test_queries_before_update_raise():
    kf = KalmanPosition()
    with pytest.raises(RuntimeError):
        kf.prediction()
    with pytest.raises(RuntimeError):
        kf.estimation()
    with pytest.raises(RuntimeError):
        kf.velocity()


def test_first_prediction_is_origin():
    kf = KalmanPosition()
    kf.update([4.0, -2.0, 6.0])
    assert np.allclose(kf.prediction(), 0.0)


def test_first_estimate_lies_between_origin_and_measurement():
    kf = KalmanPosition()
    kf.update([4.0, -2.0, 6.0])
    est = kf.estimation()
    assert 0.0 < est[0] < 4.0
    assert -2.0 < est[1] < 0.0
    assert 0.0 < est[2] < 6.0
    assert est[1] / est[0] == pytest.approx(-0.5)
    assert est[2] / est[0] == pytest.approx(1.5)


def test_constant_point_converges():
    kf = KalmanPosition()
    for _ in range(200):
        kf.update([3.0, 1.0, -2.0])
    assert np.allclose(kf.estimation(), [3.0, 1.0, -2.0], atol=1e-3)
    assert np.allclose(kf.velocity(), 0.0, atol=1e-3)


def test_linear_motion_velocity():
    kf = KalmanPosition()
    for t in range(300):
        kf.update([t * 1.0, t * 2.0, 5.0])
    assert np.allclose(kf.velocity(), [1.0, 2.0, 0.0], atol=0.05)


def test_acceleration_model_state_size_and_tracking():
    kf = KalmanPosition(use_accel=True)
    assert kf.state_size == 9
    for t in range(300):
        kf.update([0.5 * t * t * 0.01, 0.0, 1.0])
    last = 0.5 * 299 * 299 * 0.01
    assert kf.estimation()[0] == pytest.approx(last, abs=0.5)


def test_update_rejects_wrong_length():
    kf = KalmanPosition()
    with pytest.raises(ValueError):
        kf.update([1.0, 2.0])


def test_euler_unwraps_across_half_turn():
    kf = KalmanEuler()
    kf.update([170.0, 0.0, 0.0])
    kf.update([-170.0, 0.0, 0.0])
    assert kf.last_euler[0] == pytest.approx(190.0)


def test_euler_keeps_angles_without_wrap():
    kf = KalmanEuler()
    kf.update([10.0, 20.0, 30.0])
    assert np.allclose(kf.last_euler, [10.0, 20.0, 30.0])
    for _ in range(200):
        kf.update([10.0, 20.0, 30.0])
    assert np.allclose(kf.estimation(), [10.0, 20.0, 30.0], atol=1e-3)