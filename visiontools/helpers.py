"""Geometry and image helpers: rotation matrices, angle averaging and thinning."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np


def rodrigues(rvec) -> np.ndarray:
    """Turn a rotation vector (axis times angle in radians) into a 3x3 rotation matrix."""
    r = np.asarray(rvec, dtype=np.float64).ravel()
    if r.shape != (3,):
        raise ValueError("a rotation vector has exactly three components")
    theta = float(np.linalg.norm(r))
    if theta < np.finfo(np.float64).eps:
        return np.eye(3)
    k = r / theta
    skew = np.array(
        [
            [0.0, -k[2], k[1]],
            [k[2], 0.0, -k[0]],
            [-k[1], k[0], 0.0],
        ]
    )
    return np.eye(3) + math.sin(theta) * skew + (1.0 - math.cos(theta)) * (skew @ skew)


def make_matrix(rotation, translation) -> np.ndarray:
    """Build a 4x4 transform for row vectors from a rotation and a translation.

    ``rotation`` is either a 3x3 matrix or a rotation vector. The upper-left
    block of the result is the transposed rotation and the bottom row holds
    the translation, so a point ``p`` maps to ``[*p, 1] @ matrix``.
    """
    rot = np.asarray(rotation, dtype=np.float64)
    if rot.shape != (3, 3):
        rot = rodrigues(rot)
    t = np.asarray(translation, dtype=np.float64).ravel()
    if t.shape != (3,):
        raise ValueError("a translation has exactly three components")
    matrix = np.zeros((4, 4))
    matrix[:3, :3] = rot.T
    matrix[3, :3] = t
    matrix[3, 3] = 1.0
    return matrix


def force_odd(x: int) -> int:
    """The odd number ``(x / 2) * 2 + 1``, with the division truncating toward zero."""
    half = x // 2 if x >= 0 else -((-x) // 2)
    return half * 2 + 1


def find_first(arr, target: int) -> int:
    """Index of the first element equal to ``target``, or 0 if there is none."""
    hits = np.flatnonzero(np.asarray(arr).ravel() == target)
    return int(hits[0]) if hits.size else 0


def find_last(arr, target: int) -> int:
    """Index of the last element equal to ``target``, or 0 if there is none."""
    hits = np.flatnonzero(np.asarray(arr).ravel() == target)
    return int(hits[-1]) if hits.size else 0


def weighted_average_angle(lines: Iterable[Sequence[float]]) -> float:
    """Mean angle of segments ``(x1, y1, x2, y2)``, each weighted by its squared length."""
    angle_sum = 0.0
    weights = 0.0
    for x1, y1, x2, y2 in lines:
        dx = x2 - x1
        dy = y2 - y1
        weight = dx * dx + dy * dy
        angle_sum += math.atan2(dy, dx) * weight
        weights += weight
    if weights == 0:
        raise ValueError("no segment of non-zero length given")
    return angle_sum / weights


def thinning_iteration(img, iteration: int, marker) -> tuple[np.ndarray, np.ndarray]:
    """One Zhang-Suen sub-iteration on a binary image with values 0 and 1.

    ``iteration`` is 0 for the even pass and 1 for the odd pass. Pixels found
    deletable are added to ``marker``; every marked pixel is then cleared.
    Returns the thinned image and the updated marker.
    """
    image = np.asarray(img)
    mark = np.asarray(marker)
    if image.ndim != 2:
        raise ValueError("image must be single-channel")
    if image.shape[0] <= 3 or image.shape[1] <= 3:
        raise ValueError("image must be larger than 3x3")
    if mark.shape != image.shape:
        raise ValueError("marker and image shapes differ")

    p = image.astype(np.int64)
    nw, no, ne = p[:-2, :-2], p[:-2, 1:-1], p[:-2, 2:]
    we, me, ea = p[1:-1, :-2], p[1:-1, 1:-1], p[1:-1, 2:]
    sw, so, se = p[2:, :-2], p[2:, 1:-1], p[2:, 2:]

    ring = [no, ne, ea, se, so, sw, we, nw, no]
    transitions = sum(
        ((a == 0) & (b == 1)).astype(np.int64) for a, b in zip(ring, ring[1:])
    )
    neighbours = no + ne + ea + se + so + sw + we + nw
    if iteration == 0:
        m1 = no * ea * so
        m2 = ea * so * we
    else:
        m1 = no * ea * we
        m2 = no * so * we

    deletable = (
        (me != 0)
        & (transitions == 1)
        & (neighbours >= 2)
        & (neighbours <= 6)
        & (m1 == 0)
        & (m2 == 0)
    )
    new_marker = mark.astype(np.uint8).copy()
    new_marker[1:-1, 1:-1][deletable] = 1
    thinned = image.astype(np.uint8) & ~new_marker
    return thinned, new_marker


def thin(img) -> np.ndarray:
    """Thin a 0/255 binary image to one-pixel-wide strokes; returns a 0/255 image."""
    image = np.asarray(img)
    if image.ndim != 2:
        raise ValueError("image must be single-channel")
    current = np.rint(image.astype(np.float64) / 255.0).clip(0, 1).astype(np.uint8)
    marker = np.zeros_like(current)
    previous = np.zeros_like(current)
    while True:
        current, marker = thinning_iteration(current, 0, marker)
        current, marker = thinning_iteration(current, 1, marker)
        if np.array_equal(current, previous):
            break
        previous = current.copy()
    return current * np.uint8(255)


_MAX_VALUES = {
    np.dtype(np.uint8): float(np.iinfo(np.uint8).max),
    np.dtype(np.uint16): float(np.iinfo(np.uint16).max),
    np.dtype(np.int8): float(np.iinfo(np.int8).max),
    np.dtype(np.int16): float(np.iinfo(np.int16).max),
    np.dtype(np.int32): float(np.iinfo(np.int32).max),
}


def get_max_val(dtype) -> float:
    """Full-scale value of an image type: the integer maximum, or 1 for floating point."""
    dt = np.dtype(getattr(dtype, "dtype", dtype))
    return _MAX_VALUES.get(dt, 1.0)