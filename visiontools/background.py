"""Running-average background subtraction."""

from __future__ import annotations

from enum import Enum, auto

import numpy as np


class DifferenceMode(Enum):
    """How a frame is compared with the background."""

    ABSDIFF = auto()
    BRIGHTER = auto()
    DARKER = auto()


def _to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image.copy()
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0].copy()
    if image.ndim == 3 and image.shape[2] in (3, 4):
        rgb = image[:, :, :3].astype(np.float64)
        gray = 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]
        return np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    raise ValueError("unsupported number of channels")


class RunningBackground:
    """Learns a background as a running average and marks pixels that differ from it.

    After :meth:`update`, ``background`` holds the 8-bit background and
    ``foreground`` the difference between frame and background.
    """

    def __init__(
        self,
        *,
        learning_rate: float = 0.0001,
        threshold_value: int = 26,
        ignore_foreground: bool = False,
        difference_mode: DifferenceMode = DifferenceMode.ABSDIFF,
    ) -> None:
        self.learning_rate = learning_rate
        self.learning_time = 900.0
        self.use_learning_time = False
        self.threshold_value = threshold_value
        self.ignore_foreground = ignore_foreground
        self.difference_mode = difference_mode
        self.background: np.ndarray | None = None
        self.foreground: np.ndarray | None = None
        self._accumulator: np.ndarray | None = None
        self._need_reset = False

    def update(self, frame) -> np.ndarray:
        """Compare ``frame`` with the background, learn from it, return the 0/255 mask."""
        frame = np.asarray(frame)
        if frame.dtype != np.uint8:
            raise TypeError("frames must be 8-bit")
        if frame.ndim not in (2, 3):
            raise ValueError("frames must be two- or three-dimensional")
        if self._need_reset or self._accumulator is None:
            self._need_reset = False
            self._accumulator = frame.astype(np.float32)
        elif self._accumulator.shape != frame.shape:
            raise ValueError("frame shape differs from the background")

        self.background = np.clip(np.rint(self._accumulator), 0, 255).astype(np.uint8)
        bg = self.background.astype(np.int16)
        fr = frame.astype(np.int16)
        if self.difference_mode is DifferenceMode.ABSDIFF:
            diff = np.abs(bg - fr)
        elif self.difference_mode is DifferenceMode.BRIGHTER:
            diff = fr - bg
        else:
            diff = bg - fr
        self.foreground = np.clip(diff, 0, 255).astype(np.uint8)

        gray = _to_gray(self.foreground)
        above = gray > self.threshold_value
        if self.ignore_foreground:
            thresholded = np.where(above, 0, 255).astype(np.uint8)
        else:
            thresholded = np.where(above, 255, 0).astype(np.uint8)

        rate = self.learning_rate
        if self.use_learning_time:
            rate = 1.0 - (1.0 - self.threshold_value / 255.0) ** (1.0 / self.learning_time)
        blended = (1.0 - rate) * self._accumulator + rate * frame.astype(np.float32)
        if self.ignore_foreground:
            mask = thresholded != 0
            if frame.ndim == 3:
                mask = mask[:, :, None]
            self._accumulator = np.where(mask, blended, self._accumulator).astype(np.float32)
            thresholded = np.bitwise_not(thresholded)
        else:
            self._accumulator = blended.astype(np.float32)
        return thresholded

    def presence(self) -> float:
        """Mean foreground level of the first channel, as a fraction of 255."""
        if self.foreground is None:
            raise RuntimeError("no frame has been processed yet")
        fg = self.foreground[:, :, 0] if self.foreground.ndim == 3 else self.foreground
        return float(fg.mean()) / 255.0

    def set_learning_rate(self, learning_rate: float) -> None:
        """Learn with a fixed rate per frame."""
        self.learning_rate = learning_rate
        self.use_learning_time = False

    def set_learning_time(self, learning_time: float) -> None:
        """Learn at a rate derived from a time in frames and the threshold."""
        self.learning_time = learning_time
        self.use_learning_time = True

    def reset(self) -> None:
        """Take the next frame as the new background."""
        self._need_reset = True