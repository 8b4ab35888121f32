"""Computer vision building blocks: edge tangent flow and line drawing, thinning, Kalman smoothing, background subtraction, camera intrinsics and lens profiles."""

__version__ = "0.1.0"