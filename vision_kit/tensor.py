from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidInputError
from .scale import plan_scale
from .types import ScalePlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Normalization:
    """
    Per-channel normalization: value = (pixel - offset) / scale.
    """

    offset: float
    scale: float

    def __post_init__(self) -> None:
        if self.scale == 0:
            raise ValueError("Normalization scale must be non-zero")

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        out = pixels.astype(np.float32)
        if self.offset:
            out -= np.float32(self.offset)
        out /= np.float32(self.scale)
        return out


# [0, 1]: detection / correspondence models
UNIT = Normalization(offset=0.0, scale=255.0)
# [-1, 1]: matting models
SYMMETRIC = Normalization(offset=127.5, scale=127.5)

# Resampling filters by name; mapped to OpenCV flags at call time.
AREA = "area"
LINEAR = "linear"
CUBIC = "cubic"
NEAREST = "nearest"


def _require_cv2():
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resizing. Install with `pip install opencv-python`.") from e
    return cv2


def _cv2_interpolation(cv2, name: str) -> int:
    flags = {
        AREA: cv2.INTER_AREA,
        LINEAR: cv2.INTER_LINEAR,
        CUBIC: cv2.INTER_CUBIC,
        NEAREST: cv2.INTER_NEAREST,
    }
    try:
        return flags[name]
    except KeyError:
        raise ValueError(f"Unknown interpolation {name!r}. Expected one of {sorted(flags)}") from None


def validate_image(image: np.ndarray) -> None:
    """
    Accepts (H, W, 4) RGBA or (H, W, 3) RGB uint8 arrays.
    """

    if image is None or not hasattr(image, "shape"):
        raise InvalidInputError("image must be a NumPy array (RGBA or RGB).")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise InvalidInputError(f"Expected image shape (H, W, 4) or (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise InvalidInputError(f"Expected uint8 pixels, got {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidInputError(f"Image has no pixels (shape {image.shape})")


def prepare(
    image: np.ndarray,
    target_w: int,
    target_h: int,
    normalization: Normalization = UNIT,
    interpolation: str = CUBIC,
) -> np.ndarray:
    """
    Resize an image to exactly (target_w, target_h), drop alpha and normalize.

    Returns:
        float32 tensor shaped (1, 3, target_h, target_w)
    """

    validate_image(image)
    target_w, target_h = int(target_w), int(target_h)
    if target_w <= 0 or target_h <= 0:
        # Degenerate plans produce an empty region rather than an error.
        return np.zeros((1, 3, max(target_h, 0), max(target_w, 0)), dtype=np.float32)

    rgb = image[:, :, :3]
    h, w = rgb.shape[:2]
    if (w, h) != (target_w, target_h):
        cv2 = _require_cv2()
        rgb = cv2.resize(
            np.ascontiguousarray(rgb),
            (target_w, target_h),
            interpolation=_cv2_interpolation(cv2, interpolation),
        )

    # HWC -> CHW, add batch
    blob = normalization.apply(rgb)
    blob = np.transpose(blob, (2, 0, 1))[None, ...]
    return np.ascontiguousarray(blob)


def prepare_batch(
    images: Sequence[np.ndarray],
    ref_size: int = 512,
    max_size: Optional[Tuple[int, int]] = None,
    *,
    plan: Optional[ScalePlan] = None,
    normalization: Normalization = SYMMETRIC,
    interpolation: str = AREA,
    stride: int = 32,
    max_workers: Optional[int] = None,
) -> Tuple[np.ndarray, ScalePlan]:
    """
    Prepare a batch of images sharing one target shape.

    The plan is computed once from the first image (unless given) and every
    image is resized to it independently on a thread pool.

    Returns:
        (tensor shaped (N, 3, H, W), the ScalePlan used)
    """

    if images is None or len(images) == 0:
        raise InvalidInputError("No images provided.")

    for image in images:
        validate_image(image)

    if plan is None:
        first_h, first_w = images[0].shape[:2]
        plan = plan_scale(first_h, first_w, ref_size, max_size=max_size, stride=stride)

    logger.debug(
        "Preparing batch of %d image(s) at %dx%d",
        len(images),
        plan.target_width,
        plan.target_height,
    )

    def _one(image: np.ndarray) -> np.ndarray:
        return prepare(image, plan.target_width, plan.target_height, normalization, interpolation)

    if len(images) == 1:
        parts = [_one(images[0])]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            parts = list(executor.map(_one, images))

    return np.concatenate(parts, axis=0), plan
