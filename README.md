# visiontools

Computer vision building blocks written with NumPy. Images are 2-D NumPy
arrays indexed `[row, column]`. Unless a section below says otherwise, each
function returns a new array and leaves its input unchanged.

## Install

```
pip install .
```

## Modules

### `visiontools.etf`: edge tangent flow

`ETF(rows=None, cols=None)` holds a field of tangent vectors. `tx` and `ty`
are the tangent components and `mag` is the normalised gradient magnitude.
Each is an array of shape `(rows, cols)`. `max_grad` holds the largest
gradient magnitude, and the `shape` property gives the field's shape.

- `set(image)` builds the field from the Sobel gradient of a grey image. The
  image must be at least 3x3. Each tangent is the gradient turned by 90
  degrees, and border values are copied from their inner neighbours.
- `set2(image)` builds the field from the gradient of the quantised gradient
  magnitude.
- `normalize()` scales every non-zero tangent to unit length and divides the
  magnitudes by `max_grad`.
- `smooth(half_w, iterations)` runs edge-aware smoothing of the tangents. It
  makes one horizontal and one vertical pass over a window of `2 * half_w + 1`
  samples, and repeats this `iterations` times.
- `copy()` returns an independent copy of the field.

### `visiontools.fdog`: flow-based difference-of-Gaussians

- `gauss(x, mean, sigma)` gives the value of the normal density at `x`.
- `make_gaussian_vector(sigma)` returns one half of a sampled Gaussian
  kernel. It runs from the centre out to the first sample below 0.001.
- `get_directional_dog(image, etf, gau1, gau2, tau)` computes a difference of
  Gaussians across the edge direction.
- `get_flow_dog(etf, dog, gau3)` smooths that response along the flow and
  maps it to line darkness in `[0, 1]`.
- `get_fdog(image, etf, sigma, sigma3, tau)` produces the line image as
  integers. Background is 255 and lines are darker.
- `gauss_smooth_sep(image, sigma)` applies a separable Gaussian blur with
  clamped borders and returns integers.
- `binarize(image, thres)` sets each pixel to 0 or 255. `thres` is a fraction
  of 255.
- `gray_thresholding(image, thres)` keeps pixels below the threshold and sets
  the rest to 255.
- `construct_merged_image(image, gray)` keeps `image` where `gray` is
  non-zero and sets it to zero elsewhere.
- `construct_merged_image_mult(image, gray)` darkens `image` by multiplying
  it with the line image.

### `visiontools.distance`

- `edit_distance(a, b)` gives the Levenshtein distance between two strings.
- `most_representative(strs)` returns the string with the smallest sum of
  squared edit distances to the others. Ties go to the earliest string, and
  an empty sequence raises `ValueError`.

### `visiontools.tracking`

- `tracking_distance(a, b)` measures the distance between two points or two
  rectangles:
  - For points `(x, y)` it is the Euclidean distance.
  - For rectangles `(x, y, width, height)` it is the distance between the
    centres plus the distance between the sizes.

### `visiontools.helpers`

- `rodrigues(rvec)` turns a rotation vector into a 3x3 rotation matrix.
- `make_matrix(rotation, translation)` builds a 4x4 transform for row
  vectors, so that `[*p, 1] @ matrix` maps a point `p`. The rotation may be a
  3x3 matrix or a rotation vector.
- `force_odd(x)` returns `(x / 2) * 2 + 1`, with the division truncating
  toward zero.
- `find_first(arr, target)` and `find_last(arr, target)` return the index of
  the first or last matching element, or 0 if none matches.
- `weighted_average_angle(lines)` returns the mean angle in radians of
  segments `(x1, y1, x2, y2)`. Each segment is weighted by its squared length.
- `thinning_iteration(img, iteration, marker)` runs one Zhang-Suen
  sub-iteration on a 0/1 image and returns `(thinned, marker)`.
- `thin(img)` thins a 0/255 image to one-pixel strokes and returns a 0/255
  image. The image must be larger than 3x3.
- `get_max_val(dtype)` returns the full-scale value of an image type. That is
  the integer maximum for 8-, 16- and 32-bit types and 1 for any other type.

### `visiontools.kalman`

- `KalmanPosition(smoothness=0.1, rapidness=0.1, use_accel=False)` is a
  constant-velocity Kalman filter for a 3-D point. With `use_accel=True` it
  models constant acceleration instead.
  - `update(point)` predicts the next state and then corrects it with the
    measurement.
  - `prediction()`, `estimation()` and `velocity()` return 3-vectors. Calling
    them before the first update raises `RuntimeError`.
- `KalmanEuler` works the same way for Euler angles in degrees. Its
  `update(euler)` shifts the angles by whole turns so that they stay
  continuous with the previous ones.

### `visiontools.background`

`RunningBackground(learning_rate=0.0001, threshold_value=26,
ignore_foreground=False, difference_mode=DifferenceMode.ABSDIFF)` learns a
background as a running average of 8-bit frames.

- `update(frame)` returns a 0/255 mask of the pixels that differ by more than
  the threshold.
  - After each call, `background` holds the current background and
    `foreground` holds the difference between frame and background.
  - The first frame, and the first frame after `reset()`, becomes the
    background.
- `DifferenceMode` decides how a frame is compared with the background:
  `ABSDIFF` uses the absolute difference, `BRIGHTER` keeps only brighter
  pixels and `DARKER` keeps only darker ones.
- `presence()` returns the mean foreground level as a fraction of 255.
- `set_learning_rate(rate)` sets a fixed rate per frame.
- `set_learning_time(frames)` derives the rate from a time in frames and the
  threshold.

### `visiontools.calibration`

- `Intrinsics(camera_matrix, image_size, sensor_size=(0, 0))` describes a
  pinhole camera.
  - `image_size` is `(width, height)` in pixels. `sensor_size` is
    `(width, height)` in millimetres, and `(0, 0)` means unknown.
  - It derives `fov` (in degrees), `focal_length`, `principal_point` and
    `aspect_ratio`.
  - `Intrinsics.from_focal_length(focal_length, image_size, sensor_size,
    principal_point=(0.5, 0.5))` builds intrinsics from a focal length in
    millimetres.
  - `projection_frustum(near_dist, far_dist)` returns a 4x4 perspective
    projection matrix.
- `distortion_coefficients(k1, k2, p1, p2, k3, k4, k5, k6)` returns the eight
  coefficients as an array. Any coefficient you leave out is zero.
- `create_object_points(pattern_size=(10, 7), square_size=2.5,
  pattern_type=CalibrationPattern.CHESSBOARD)` returns the board's feature
  positions as an `(n, 3)` array, row by row.
  - `pattern_size` is `(columns, rows)`.
  - The pattern types are `CHESSBOARD`, `CIRCLES_GRID` and
    `ASYMMETRIC_CIRCLES_GRID`.

### `visiontools.lcp`: lens correction profiles

`parse_lcp(text, focal_length, image_width=0, image_height=0)` reads an LCP
document. `load_lcp(path, ...)` does the same for a file. Both return a
`LensProfile` with `intrinsics`, `dist_coeffs` and `crop_factor`.

- The profile used is the nearest one at or below the focal length.
- When a profile above the focal length also exists, the radial distortion
  parameters are interpolated between the two.
- A width or height of 0 means the size recorded in the profile.
- A document with no usable profile raises `ValueError`.

## Examples

A coherent line drawing:

```python
import numpy as np
from visiontools.etf import ETF
from visiontools.fdog import get_fdog, binarize

gray = np.random.default_rng(0).integers(0, 256, (64, 64))

etf = ETF()
etf.set(gray)
etf.smooth(4, 3)

lines = get_fdog(gray, etf, 1.0, 3.0, 0.99)
lines = binarize(lines, 0.7)
```

Edit distance:

```python
from visiontools.distance import edit_distance, most_representative

edit_distance("kitten", "sitting")               # 3
most_representative(["abc", "abd", "xyz"])       # "abc"
```

Smoothing a tracked position:

```python
from visiontools.kalman import KalmanPosition

kf = KalmanPosition(smoothness=0.01, rapidness=0.1)
for p in [(0, 0, 0), (1, 0, 0), (2, 0, 0)]:
    kf.update(p)
kf.estimation(), kf.velocity()
```

Camera intrinsics and board geometry:

```python
from visiontools.calibration import Intrinsics, create_object_points

cam = Intrinsics.from_focal_length(35.0, (1920, 1080), (36.0, 24.0))
cam.fov, cam.focal_length
create_object_points((10, 7), 2.5).shape         # (70, 3)
```

## What it does not do

Everything works on arrays that you supply. The package has:

- no image or video input and output,
- no drawing or display,
- no contour finding, optical flow or object detection,
- no detection of calibration boards in images, and no solving of camera
  parameters from such images,
- no undistortion of images or points,
- no command-line program.

## Running the tests

```
pip install .[test]
pytest
```