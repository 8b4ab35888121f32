"""Camera intrinsics and lens distortion read from lens correction profiles (LCP).

A lens correction profile is an XMP document that lists camera profiles,
one per focal length. The profile closest to the requested focal length
from below is used. When there is also a profile above it, the radial
distortion parameters are blended linearly between the two.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike

import numpy as np

from visiontools.calibration import Intrinsics, distortion_coefficients

_FULL_FRAME_WIDTH_MM = 35.0


@dataclass(frozen=True)
class LensProfile:
    """Intrinsics and distortion coefficients taken from a lens correction profile."""

    intrinsics: Intrinsics
    dist_coeffs: np.ndarray
    crop_factor: float


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _resource(element: ET.Element) -> ET.Element:
    """The node holding a resource's properties: a nested description, if any."""
    descriptions = _children(element, "Description")
    return descriptions[0] if descriptions else element


def _field(node: ET.Element, name: str) -> float | None:
    """A numeric property given either as an attribute or as a child element."""
    for key, value in node.attrib.items():
        if _local(key) == name:
            return _to_float(value, name)
    for child in _children(node, name):
        text = (child.text or "").strip()
        if text:
            return _to_float(text, name)
    return None


def _to_float(text: str, name: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{name} is not a number: {text!r}") from None


def _required(node: ET.Element, name: str) -> float:
    value = _field(node, name)
    if value is None:
        raise ValueError(f"camera profile has no {name}")
    return value


def _model_field(node: ET.Element, name: str) -> float:
    """A perspective model property; absent values count as zero."""
    for model in _children(node, "PerspectiveModel"):
        value = _field(_resource(model), name)
        if value is not None:
            return value
    return 0.0


def _camera_profiles(root: ET.Element) -> Iterator[ET.Element]:
    for rdf in root.iter():
        if _local(rdf.tag) != "RDF":
            continue
        for description in _children(rdf, "Description"):
            for profiles in _children(description, "CameraProfiles"):
                for seq in _children(profiles, "Seq"):
                    for item in seq:
                        yield _resource(item)


def parse_lcp(
    text: str | bytes,
    focal_length: float,
    image_width: int = 0,
    image_height: int = 0,
) -> LensProfile:
    """Read a lens profile for ``focal_length`` (in millimetres) from LCP text.

    An image width or height of 0 means the size recorded in the profile.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"not a valid lens profile document: {exc}") from exc

    lower: tuple[float, ET.Element] | None = None
    upper: tuple[float, ET.Element] | None = None
    for node in _camera_profiles(root):
        current = _required(node, "FocalLength")
        if current <= focal_length and (lower is None or current > lower[0]):
            lower = (current, node)
        if current > focal_length and (upper is None or current < upper[0]):
            upper = (current, node)

    if lower is None:
        raise ValueError(
            f"no camera profile with a focal length of at most {focal_length}"
        )
    lower_focal, lower_node = lower

    lcp_width = _required(lower_node, "ImageWidth")
    lcp_height = _required(lower_node, "ImageLength")
    crop_factor = _required(lower_node, "SensorFormatFactor")
    if crop_factor == 0:
        raise ValueError("the sensor format factor must be non-zero")
    if lcp_width == 0:
        raise ValueError("the profile's image width must be non-zero")

    k1, k2, k3 = (
        _model_field(lower_node, f"RadialDistortParam{n}") for n in (1, 2, 3)
    )
    if upper is not None:
        upper_focal, upper_node = upper
        t = (focal_length - lower_focal) / (upper_focal - lower_focal)
        k1g, k2g, k3g = (
            _model_field(upper_node, f"RadialDistortParam{n}") for n in (1, 2, 3)
        )
        k1 = k1g * t + k1 * (1 - t)
        k2 = k2g * t + k2 * (1 - t)
        k3 = k3g * t + k3 * (1 - t)

    dist_coeffs = distortion_coefficients(k1, k2, k3, 0.0)

    sensor_width = _FULL_FRAME_WIDTH_MM / crop_factor
    sensor_size = (sensor_width, sensor_width * lcp_height / lcp_width)
    if image_width == 0:
        image_width = int(lcp_width)
    if image_height == 0:
        image_height = int(lcp_height)

    intrinsics = Intrinsics.from_focal_length(
        focal_length, (image_width, image_height), sensor_size
    )
    return LensProfile(intrinsics, dist_coeffs, crop_factor)


def load_lcp(
    path: str | PathLike,
    focal_length: float,
    image_width: int = 0,
    image_height: int = 0,
) -> LensProfile:
    """Read a lens profile for ``focal_length`` from an LCP file."""
    with open(path, "rb") as handle:
        data = handle.read()
    return parse_lcp(data, focal_length, image_width, image_height)