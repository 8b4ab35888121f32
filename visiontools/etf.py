"""Edge tangent flow: a smooth field of unit vectors tangent to image edges."""

from __future__ import annotations

import numpy as np

_SOBEL_SCALE = 1020.0


def _sobel(image: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return the interior Sobel responses along rows and columns."""
    img = image.astype(np.float64)
    along_rows = (
        img[2:, :-2] + 2 * img[2:, 1:-1] + img[2:, 2:]
        - img[:-2, :-2] - 2 * img[:-2, 1:-1] - img[:-2, 2:]
    ) / _SOBEL_SCALE
    along_cols = (
        img[:-2, 2:] + 2 * img[1:-1, 2:] + img[2:, 2:]
        - img[:-2, :-2] - 2 * img[1:-1, :-2] - img[2:, :-2]
    ) / _SOBEL_SCALE
    return along_rows, along_cols


def _fill_border(arr: np.ndarray) -> None:
    """Copy interior values out to the border; corners average their two neighbours."""
    arr[1:-1, 0] = arr[1:-1, 1]
    arr[1:-1, -1] = arr[1:-1, -2]
    arr[0, 1:-1] = arr[1, 1:-1]
    arr[-1, 1:-1] = arr[-2, 1:-1]

    def average(a, b):
        if np.issubdtype(arr.dtype, np.integer):
            return (a + b) // 2
        return (a + b) / 2

    arr[0, 0] = average(arr[0, 1], arr[1, 0])
    arr[0, -1] = average(arr[0, -2], arr[1, -1])
    arr[-1, 0] = average(arr[-1, 1], arr[-2, 0])
    arr[-1, -1] = average(arr[-1, -2], arr[-2, -1])


def _make_unit(vx: np.ndarray, vy: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Scale each (vx, vy) pair to unit length, leaving zero vectors alone."""
    length = np.sqrt(vx * vx + vy * vy)
    nonzero = length != 0.0
    safe = np.where(nonzero, length, 1.0)
    return np.where(nonzero, vx / safe, vx), np.where(nonzero, vy / safe, vy)


def _checked_image(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim != 2:
        raise ValueError("image must be two-dimensional")
    if arr.shape[0] < 3 or arr.shape[1] < 3:
        raise ValueError("image must be at least 3x3")
    return arr


class ETF:
    """Edge tangent flow field.

    ``tx`` and ``ty`` hold the tangent components and ``mag`` the normalised
    gradient magnitude, each an array of shape ``(rows, cols)``.
    """

    def __init__(self, rows: int | None = None, cols: int | None = None) -> None:
        if rows is None and cols is None:
            self.tx = np.ones((1, 1))
            self.ty = np.zeros((1, 1))
            self.mag = np.ones((1, 1))
        else:
            if rows is None or cols is None or rows < 1 or cols < 1:
                raise ValueError("rows and cols must both be positive")
            self.tx = np.zeros((rows, cols))
            self.ty = np.zeros((rows, cols))
            self.mag = np.zeros((rows, cols))
        self.max_grad = 1.0

    @property
    def shape(self) -> tuple[int, int]:
        return self.tx.shape

    def set(self, image) -> None:
        """Build the field from the Sobel gradient of a grey image."""
        img = _checked_image(image)
        rows, cols = img.shape
        gx, gy = _sobel(img)
        self.tx = np.zeros((rows, cols))
        self.ty = np.zeros((rows, cols))
        self.mag = np.zeros((rows, cols))
        self.tx[1:-1, 1:-1] = -gy
        self.ty[1:-1, 1:-1] = gx
        interior = np.sqrt(gy * gy + gx * gx)
        self.mag[1:-1, 1:-1] = interior
        self.max_grad = max(-1.0, float(interior.max()))
        for arr in (self.tx, self.ty, self.mag):
            _fill_border(arr)
        self.normalize()

    def set2(self, image) -> None:
        """Build the field from the gradient of the quantised gradient magnitude."""
        img = _checked_image(image)
        rows, cols = img.shape
        gx, gy = _sobel(img)

        tmp = np.zeros((rows, cols), dtype=np.int64)
        tmp[1:-1, 1:-1] = np.sqrt(gx * gx + gy * gy).astype(np.int64)
        self.max_grad = max(-1.0, float(tmp[1:-1, 1:-1].max()))
        _fill_border(tmp)

        if self.max_grad != 0:
            scaled = (tmp / self.max_grad).astype(np.int64)
        else:
            scaled = np.zeros_like(tmp)
        gmag = (scaled * 255.0).astype(np.int64)

        gx2, gy2 = _sobel(gmag)
        self.tx = np.zeros((rows, cols))
        self.ty = np.zeros((rows, cols))
        self.mag = np.zeros((rows, cols))
        self.tx[1:-1, 1:-1] = -gy2
        self.ty[1:-1, 1:-1] = gx2
        interior = np.sqrt(gy2 * gy2 + gx2 * gx2)
        self.mag[1:-1, 1:-1] = interior
        self.max_grad = max(self.max_grad, float(interior.max()))
        for arr in (self.tx, self.ty, self.mag):
            _fill_border(arr)
        self.normalize()

    def normalize(self) -> None:
        """Make every tangent a unit vector and scale magnitudes by the maximum."""
        self.tx, self.ty = _make_unit(self.tx, self.ty)
        with np.errstate(divide="ignore", invalid="ignore"):
            self.mag = self.mag / self.max_grad

    def _smooth_pass(self, half_w: int, axis: int) -> tuple[np.ndarray, np.ndarray]:
        size = self.tx.shape[axis]
        base = np.arange(size)
        gx = np.zeros_like(self.tx)
        gy = np.zeros_like(self.ty)
        for offset in range(-half_w, half_w + 1):
            idx = np.clip(base + offset, 0, size - 1)
            wx = np.take(self.tx, idx, axis=axis)
            wy = np.take(self.ty, idx, axis=axis)
            wmag = np.take(self.mag, idx, axis=axis)
            factor = np.where(self.tx * wx + self.ty * wy < 0.0, -1.0, 1.0)
            weight = (wmag - self.mag) + 1
            gx += weight * wx * factor
            gy += weight * wy * factor
        return _make_unit(gx, gy)

    def smooth(self, half_w: int, iterations: int) -> None:
        """Run separable edge-aware smoothing of the tangents, ``iterations`` times."""
        for _ in range(iterations):
            self.tx, self.ty = self._smooth_pass(half_w, axis=0)
            self.tx, self.ty = self._smooth_pass(half_w, axis=1)

    def copy(self) -> "ETF":
        """Return an independent copy of the field."""
        other = ETF.__new__(ETF)
        other.tx = self.tx.copy()
        other.ty = self.ty.copy()
        other.mag = self.mag.copy()
        other.max_grad = self.max_grad
        return other