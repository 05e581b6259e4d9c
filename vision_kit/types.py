from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """
    Image-space detection produced by the detection decoder.

    Corners are not reordered on construction; the decoder clamps them to the
    source image bounds.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    class_id: int
    prob: float

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)


@dataclass(frozen=True)
class GluedPair:
    """One matched keypoint: (from_x, from_y) in image A, (to_x, to_y) in image B."""

    from_x: int
    from_y: int
    to_x: int
    to_y: int


@dataclass(frozen=True)
class ScalePlan:
    target_width: int
    target_height: int
    x_scale: float
    y_scale: float


@dataclass(frozen=True)
class FlameOutput:
    # (B * 5023, 3) and (B * 68, 3) for the stock FLAME export
    vertices: np.ndarray
    landmarks: np.ndarray
