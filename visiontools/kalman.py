"""Kalman filters that smooth a 3-D position or a set of Euler angles."""

from __future__ import annotations

import math

import numpy as np


class KalmanPosition:
    """Constant-velocity (or constant-acceleration) Kalman filter for a 3-D point.

    ``smoothness`` is the process noise and ``rapidness`` the measurement
    noise; the initial error covariance is 0.1 on the diagonal.
    """

    def __init__(
        self, smoothness: float = 0.1, rapidness: float = 0.1, use_accel: bool = False
    ) -> None:
        n = 9 if use_accel else 6
        transition = np.eye(n)
        transition[0:3, 3:6] += np.eye(3)
        if use_accel:
            transition[0:3, 6:9] += 0.5 * np.eye(3)
            transition[3:6, 6:9] += np.eye(3)
        self._transition = transition
        self._measurement_matrix = np.eye(3, n)
        self._process_noise = smoothness * np.eye(n)
        self._measurement_noise = rapidness * np.eye(3)
        self._state_post = np.zeros(n)
        self._error_post = 0.1 * np.eye(n)
        self._prediction: np.ndarray | None = None
        self._estimated: np.ndarray | None = None

    @property
    def state_size(self) -> int:
        return self._transition.shape[0]

    def update(self, point) -> None:
        """Predict the next state, then correct it with the measured ``point``."""
        z = np.asarray(point, dtype=np.float64).ravel()
        if z.shape != (3,):
            raise ValueError("a measurement has exactly three components")
        f = self._transition
        h = self._measurement_matrix

        state_pre = f @ self._state_post
        error_pre = f @ self._error_post @ f.T + self._process_noise
        self._prediction = state_pre.copy()

        temp2 = h @ error_pre
        temp3 = temp2 @ h.T + self._measurement_noise
        gain = np.linalg.solve(temp3, temp2).T
        self._state_post = state_pre + gain @ (z - h @ state_pre)
        self._error_post = error_pre - gain @ temp2
        self._estimated = self._state_post.copy()

    def _require(self, value: np.ndarray | None) -> np.ndarray:
        if value is None:
            raise RuntimeError("the filter has not been updated yet")
        return value

    def prediction(self) -> np.ndarray:
        """Position predicted before the last measurement was applied."""
        return self._require(self._prediction)[0:3].copy()

    def estimation(self) -> np.ndarray:
        """Position estimated after the last measurement."""
        return self._require(self._estimated)[0:3].copy()

    def velocity(self) -> np.ndarray:
        """Velocity estimated after the last measurement."""
        return self._require(self._estimated)[3:6].copy()


class KalmanEuler(KalmanPosition):
    """Kalman filter for Euler angles in degrees that unwraps turns past ±180."""

    def __init__(
        self, smoothness: float = 0.1, rapidness: float = 0.1, use_accel: bool = False
    ) -> None:
        super().__init__(smoothness, rapidness, use_accel)
        self.last_euler = np.zeros(3)

    def update(self, euler) -> None:
        """Feed angles, shifted by whole turns to stay continuous with the last ones."""
        angles = np.asarray(euler, dtype=np.float64).ravel().copy()
        if angles.shape != (3,):
            raise ValueError("expected three Euler angles")
        for i, prev in enumerate(self.last_euler):
            rev = math.floor((prev + 180.0) / 360.0) * 360.0
            angles[i] += rev
            if angles[i] < -90.0 + rev and prev > 90.0 + rev:
                angles[i] += 360.0
            elif angles[i] > 90.0 + rev and prev < -90.0 + rev:
                angles[i] -= 360.0
        super().update(angles)
        self.last_euler = angles