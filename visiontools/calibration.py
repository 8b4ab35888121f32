"""Camera intrinsics, lens distortion coefficients and calibration board geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np


class CalibrationPattern(Enum):
    """Kind of calibration board."""

    CHESSBOARD = auto()
    CIRCLES_GRID = auto()
    ASYMMETRIC_CIRCLES_GRID = auto()


@dataclass
class Intrinsics:
    """Pinhole camera intrinsics with the values derived from them.

    ``image_size`` is ``(width, height)`` in pixels and ``sensor_size`` is
    ``(width, height)`` in millimetres; a zero sensor size means unknown.
    ``fov`` is ``(x, y)`` in degrees, ``focal_length`` is in millimetres (in
    pixels when the sensor size is unknown) and ``principal_point`` is in
    the same units as ``focal_length``.
    """

    camera_matrix: np.ndarray
    image_size: tuple[int, int]
    sensor_size: tuple[float, float] = (0.0, 0.0)
    fov: tuple[float, float] = field(init=False)
    focal_length: float = field(init=False)
    principal_point: tuple[float, float] = field(init=False)
    aspect_ratio: float = field(init=False)

    def __post_init__(self) -> None:
        matrix = np.array(self.camera_matrix, dtype=np.float64)
        if matrix.shape != (3, 3):
            raise ValueError("a camera matrix is 3x3")
        self.camera_matrix = matrix
        width, height = self.image_size
        self.image_size = (int(width), int(height))
        sensor_w, sensor_h = self.sensor_size
        self.sensor_size = (float(sensor_w), float(sensor_h))
        self._update_values()

    def _update_values(self) -> None:
        alpha_x = self.camera_matrix[0, 0]
        alpha_y = self.camera_matrix[1, 1]
        cx = self.camera_matrix[0, 2]
        cy = self.camera_matrix[1, 2]
        if alpha_x == 0 or alpha_y == 0:
            raise ValueError("focal lengths in the camera matrix must be non-zero")
        width, height = self.image_size
        sensor_w, sensor_h = self.sensor_size

        self.aspect_ratio = float(alpha_y / alpha_x)
        if sensor_w != 0.0 and sensor_h != 0.0:
            mx = width / sensor_w
            my = height / sensor_h
        else:
            mx = 1.0
            my = self.aspect_ratio

        fov_x = math.atan2(cx, alpha_x) + math.atan2(width - cx, alpha_x)
        fov_y = math.atan2(cy, alpha_y) + math.atan2(height - cy, alpha_y)
        self.fov = (math.degrees(fov_x), math.degrees(fov_y))
        self.focal_length = float(alpha_x / mx)
        self.principal_point = (float(cx / mx), float(cy / my))

    @classmethod
    def from_focal_length(
        cls,
        focal_length: float,
        image_size: tuple[int, int],
        sensor_size: tuple[float, float],
        principal_point: tuple[float, float] = (0.5, 0.5),
    ) -> "Intrinsics":
        """Build intrinsics from a focal length in millimetres.

        ``principal_point`` is given as a fraction of the image size.
        """
        width, height = image_size
        sensor_w = sensor_size[0]
        if sensor_w == 0:
            raise ValueError("the sensor width must be non-zero")
        focal_pixels = (focal_length / sensor_w) * width
        cx = width * principal_point[0]
        cy = height * principal_point[1]
        matrix = np.array(
            [
                [focal_pixels, 0.0, cx],
                [0.0, focal_pixels, cy],
                [0.0, 0.0, 1.0],
            ]
        )
        return cls(matrix, image_size, sensor_size)

    def projection_frustum(self, near_dist: float, far_dist: float) -> np.ndarray:
        """Perspective projection matrix (column-vector convention) for these intrinsics."""
        if near_dist <= 0:
            raise ValueError("the near distance must be positive")
        if far_dist <= near_dist:
            raise ValueError("the far distance must exceed the near distance")
        width, height = self.image_size
        fx = self.camera_matrix[0, 0]
        fy = self.camera_matrix[1, 1]
        cx, cy = self.principal_point

        left = near_dist * (-cx) / fx
        right = near_dist * (width - cx) / fx
        bottom = near_dist * cy / fy
        top = near_dist * (cy - height) / fy
        if right == left or top == bottom:
            raise ValueError("the image size gives an empty frustum")

        n, f = near_dist, far_dist
        return np.array(
            [
                [2 * n / (right - left), 0.0, (right + left) / (right - left), 0.0],
                [0.0, 2 * n / (top - bottom), (top + bottom) / (top - bottom), 0.0],
                [0.0, 0.0, -(f + n) / (f - n), -2 * f * n / (f - n)],
                [0.0, 0.0, -1.0, 0.0],
            ]
        )


def distortion_coefficients(
    k1: float = 0.0,
    k2: float = 0.0,
    p1: float = 0.0,
    p2: float = 0.0,
    k3: float = 0.0,
    k4: float = 0.0,
    k5: float = 0.0,
    k6: float = 0.0,
) -> np.ndarray:
    """The eight distortion coefficients in the order k1, k2, p1, p2, k3, k4, k5, k6."""
    return np.array([k1, k2, p1, p2, k3, k4, k5, k6], dtype=np.float64)


def create_object_points(
    pattern_size: tuple[int, int] = (10, 7),
    square_size: float = 2.5,
    pattern_type: CalibrationPattern = CalibrationPattern.CHESSBOARD,
) -> np.ndarray:
    """World positions of the board features, row by row, as an ``(n, 3)`` array.

    ``pattern_size`` is ``(columns, rows)``. In an asymmetric circles grid
    every other row is shifted by one square.
    """
    columns, rows = pattern_size
    if columns < 0 or rows < 0:
        raise ValueError("pattern dimensions must not be negative")
    if not isinstance(pattern_type, CalibrationPattern):
        raise ValueError(f"unknown pattern type: {pattern_type!r}")
    i, j = np.meshgrid(np.arange(rows), np.arange(columns), indexing="ij")
    if pattern_type is CalibrationPattern.ASYMMETRIC_CIRCLES_GRID:
        x = (2 * j + i % 2) * square_size
    else:
        x = j * square_size
    y = i * square_size
    points = np.stack(
        [x.ravel().astype(np.float32), y.ravel().astype(np.float32)], axis=1
    )
    return np.hstack([points, np.zeros((points.shape[0], 1), dtype=np.float32)])