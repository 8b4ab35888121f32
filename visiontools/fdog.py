"""Flow-based difference-of-Gaussians line drawing and related image helpers."""

from __future__ import annotations

import math

import numpy as np

from visiontools.etf import ETF

_GAUSS_THRESHOLD = 0.001
_STEP_SIZE = 1.0


def _round(values) -> np.ndarray:
    """Round by adding one half and truncating toward zero."""
    return np.trunc(np.asarray(values, dtype=np.float64) + 0.5).astype(np.int64)


def _as_image(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim != 2:
        raise ValueError("image must be two-dimensional")
    if arr.size == 0:
        raise ValueError("image must not be empty")
    return arr


def _check_same_shape(a: np.ndarray, b: np.ndarray, what: str) -> None:
    if a.shape != b.shape:
        raise ValueError(f"{what} shapes differ: {a.shape} and {b.shape}")


def gauss(x: float, mean: float, sigma: float) -> float:
    """Value of the normal density with the given mean and sigma at ``x``."""
    variance = sigma * sigma
    return math.exp(-(x - mean) * (x - mean) / (2 * variance)) / math.sqrt(
        math.pi * 2.0 * variance
    )


def make_gaussian_vector(sigma: float) -> np.ndarray:
    """Half of a sampled Gaussian kernel, from the centre out to where it drops below 0.001."""
    if not sigma > 0:
        raise ValueError("sigma must be positive")
    i = 1
    while gauss(float(i), 0.0, sigma) >= _GAUSS_THRESHOLD:
        i += 1
    return np.array([gauss(float(j), 0.0, sigma) for j in range(i + 1)])


def get_directional_dog(image, etf: ETF, gau1, gau2, tau: float) -> np.ndarray:
    """Difference of Gaussians taken across the edge direction at every pixel."""
    img = _as_image(image).astype(np.float64)
    if etf.shape != img.shape:
        raise ValueError("flow field and image shapes differ")
    gau1 = np.asarray(gau1, dtype=np.float64)
    gau2 = np.asarray(gau2, dtype=np.float64)
    half_w1 = len(gau1) - 1
    half_w2 = len(gau2) - 1
    rows, cols = img.shape

    vn0 = -etf.ty
    vn1 = etf.tx
    still = (vn0 == 0.0) & (vn1 == 0.0)
    ii, jj = np.indices((rows, cols), dtype=np.float64)

    sum1 = np.zeros((rows, cols))
    sum2 = np.zeros((rows, cols))
    w_sum1 = np.zeros((rows, cols))
    w_sum2 = np.zeros((rows, cols))

    for s in range(-half_w2, half_w2 + 1):
        x = ii + vn0 * s
        y = jj + vn1 * s
        valid = (x <= rows - 1) & (x >= 0.0) & (y <= cols - 1) & (y >= 0.0)
        x1 = np.clip(_round(np.where(valid, x, 0.0)), 0, rows - 1)
        y1 = np.clip(_round(np.where(valid, y, 0.0)), 0, cols - 1)
        val = img[x1, y1]
        dd = abs(s)
        weight1 = gau1[dd] if dd <= half_w1 else 0.0
        weight2 = gau2[dd]
        sum1 += np.where(valid, val * weight1, 0.0)
        w_sum1 += np.where(valid, weight1, 0.0)
        sum2 += np.where(valid, val * weight2, 0.0)
        w_sum2 += np.where(valid, weight2, 0.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        dog = sum1 / w_sum1 - tau * (sum2 / w_sum2)
    return np.where(still, 255.0 - tau * 255.0, dog)


def _walk(etf: ETF, dog: np.ndarray, gau3: np.ndarray, sign: float):
    """Accumulate weighted samples along the flow, in one direction."""
    rows, cols = dog.shape
    half_l = len(gau3) - 1
    ii, jj = np.indices((rows, cols))
    d_x = ii.astype(np.float64)
    d_y = jj.astype(np.float64)
    i_x = ii.copy()
    i_y = jj.copy()
    active = np.ones((rows, cols), dtype=bool)
    total = np.zeros((rows, cols))
    weights = np.zeros((rows, cols))

    for k in range(half_l):
        vt0 = sign * etf.tx[i_x, i_y]
        vt1 = sign * etf.ty[i_x, i_y]
        active &= ~((vt0 == 0.0) & (vt1 == 0.0))
        active &= (d_x <= rows - 1) & (d_x >= 0.0) & (d_y <= cols - 1) & (d_y >= 0.0)
        if not active.any():
            break
        x1 = np.clip(_round(np.where(active, d_x, 0.0)), 0, rows - 1)
        y1 = np.clip(_round(np.where(active, d_y, 0.0)), 0, cols - 1)
        weight = gau3[k]
        total += np.where(active, dog[x1, y1] * weight, 0.0)
        weights += np.where(active, weight, 0.0)
        d_x = np.where(active, d_x + vt0 * _STEP_SIZE, d_x)
        d_y = np.where(active, d_y + vt1 * _STEP_SIZE, d_y)
        active &= (d_x >= 0) & (d_x <= rows - 1) & (d_y >= 0) & (d_y <= cols - 1)
        i_x = np.where(active, np.clip(_round(d_x), 0, rows - 1), i_x)
        i_y = np.where(active, np.clip(_round(d_y), 0, cols - 1), i_y)
    return total, weights


def get_flow_dog(etf: ETF, dog, gau3) -> np.ndarray:
    """Smooth a DoG response along the flow and map it to line darkness in [0, 1]."""
    dog = np.asarray(dog, dtype=np.float64)
    if dog.ndim != 2:
        raise ValueError("dog must be two-dimensional")
    if etf.shape != dog.shape:
        raise ValueError("flow field and response shapes differ")
    gau3 = np.asarray(gau3, dtype=np.float64)

    centre = gau3[0]
    sum1 = dog * centre
    w_sum1 = np.full(dog.shape, centre)
    for sign in (1.0, -1.0):
        total, weights = _walk(etf, dog, gau3, sign)
        sum1 = sum1 + total
        w_sum1 = w_sum1 + weights
    sum1 = sum1 / w_sum1
    return np.where(sum1 > 0, 1.0, 1.0 + np.tanh(sum1))


def get_fdog(image, etf: ETF, sigma: float, sigma3: float, tau: float) -> np.ndarray:
    """Flow-based DoG line image: 255 for background, darker values along lines."""
    img = _as_image(image)
    gau1 = make_gaussian_vector(sigma)
    gau2 = make_gaussian_vector(sigma * 1.6)
    gau3 = make_gaussian_vector(sigma3)
    dog = get_directional_dog(img, etf, gau1, gau2, tau)
    tmp = get_flow_dog(etf, dog, gau3)
    return _round(tmp * 255.0)


def gauss_smooth_sep(image, sigma: float) -> np.ndarray:
    """Separable Gaussian blur with clamped borders, rounded to integers."""
    img = _as_image(image).astype(np.float64)
    kernel = make_gaussian_vector(sigma)
    half = len(kernel) - 1

    def blur(data: np.ndarray, axis: int) -> np.ndarray:
        size = data.shape[axis]
        base = np.arange(size)
        acc = np.zeros_like(data)
        w_sum = 0.0
        for s in range(-half, half + 1):
            weight = kernel[abs(s)]
            acc += weight * np.take(data, np.clip(base + s, 0, size - 1), axis=axis)
            w_sum += weight
        return acc / w_sum

    return _round(blur(blur(img, axis=0), axis=1))


def construct_merged_image(image, gray) -> np.ndarray:
    """Keep ``image`` where ``gray`` is non-zero and set it to zero elsewhere."""
    img = _as_image(image)
    mask = _as_image(gray)
    _check_same_shape(img, mask, "image and gray")
    return np.where(mask == 0, 0, img).astype(np.int64)


def construct_merged_image_mult(image, gray) -> np.ndarray:
    """Darken ``image`` by multiplying it with the line image ``gray``."""
    img = _as_image(image)
    lines = _as_image(gray)
    _check_same_shape(img, lines, "image and gray")
    value = (img / 255.0) * (lines / 255.0)
    return _round(value * 255.0)


def binarize(image, thres: float) -> np.ndarray:
    """Set pixels below ``thres`` (as a fraction of 255) to 0 and the rest to 255."""
    img = _as_image(image)
    return np.where(img / 255.0 < thres, 0, 255).astype(np.int64)


def gray_thresholding(image, thres: float) -> np.ndarray:
    """Keep pixels below ``thres`` (as a fraction of 255) and set the rest to 255."""
    img = _as_image(image)
    val = img / 255.0
    return np.where(val < thres, _round(val * 255.0), 255).astype(np.int64)