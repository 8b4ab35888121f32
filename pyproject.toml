[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "visiontools"
version = "0.1.0"
description = "Computer vision building blocks on NumPy: edge tangent flow, flow-based difference-of-Gaussians line drawing, thinning, Kalman smoothing, background subtraction, camera intrinsics and lens profiles"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = [
    "computer vision",
    "image processing",
    "line drawing",
    "edge tangent flow",
    "difference of gaussians",
    "kalman filter",
    "background subtraction",
    "camera intrinsics",
    "lens correction profile",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["visiontools"]

[tool.pytest.ini_options]
addopts = "-ra"
