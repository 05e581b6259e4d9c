from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import numpy as np

from .errors import ShapeMismatchError


def _to_luma(alpha: np.ndarray) -> np.ndarray:
    # NaN -> 0, clamp to [0, 1], then truncate like an integer cast.
    values = np.nan_to_num(alpha.astype(np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    values = np.clip(values, 0.0, 1.0) * np.float32(255.0)
    return values.astype(np.uint8)


def decode_masks(output: np.ndarray, max_workers: Optional[int] = None) -> List[np.ndarray]:
    """
    Convert a (B, 1, H, W) matte tensor into B single-channel uint8 images.

    Batch elements are decoded independently on a thread pool; the returned
    list follows batch order.
    """

    data = np.asarray(output)
    if data.ndim != 4 or data.shape[1] != 1:
        raise ShapeMismatchError(f"Expected matte output shaped (B, 1, H, W), got {data.shape}")

    batch_size = data.shape[0]
    if batch_size == 0:
        return []
    if batch_size == 1:
        return [_to_luma(data[0, 0])]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(_to_luma, (data[i, 0] for i in range(batch_size))))


def resize_mask(mask: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Scale a decoded matte back to the source image size (bilinear).
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resize_mask(). Install with `pip install opencv-python`.") from e

    if mask.ndim != 2:
        raise ShapeMismatchError(f"Expected a single-channel (H, W) mask, got {mask.shape}")
    if mask.size == 0:
        # degenerate plans decode to empty mattes; nothing to interpolate from
        return np.zeros((int(height), int(width)), dtype=np.uint8)
    if mask.shape[1] == width and mask.shape[0] == height:
        return mask.copy()
    return cv2.resize(mask, (int(width), int(height)), interpolation=cv2.INTER_LINEAR)
