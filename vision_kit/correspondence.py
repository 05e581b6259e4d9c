from __future__ import annotations

from typing import List, Tuple

import numpy as np

from .errors import ShapeMismatchError
from .types import GluedPair


def unique_pairs(n: int) -> List[Tuple[int, int]]:
    """All unordered index pairs (i, j) with i < j."""
    return [(i, j) for i in range(n) for j in range(i + 1, n)]


def _as_points(kpts: np.ndarray, name: str) -> np.ndarray:
    """
    Normalize a keypoint tensor to an (K, 2) int64 array.

    Accepts (K, 2) or (1, K, 2); float coordinates are rounded to the nearest pixel.
    """

    p = np.asarray(kpts)
    if p.ndim == 3:
        if p.shape[0] != 1:
            raise ShapeMismatchError(f"{name}: batch > 1 is not supported (got shape {p.shape})")
        p = p[0]
    if p.ndim != 2 or p.shape[1] < 2:
        raise ShapeMismatchError(f"{name}: expected keypoints shaped (K, 2) or (1, K, 2), got {np.asarray(kpts).shape}")
    p = p[:, :2]
    if np.issubdtype(p.dtype, np.floating):
        p = np.rint(p)
    return p.astype(np.int64)


def extract_correspondences(
    kpts0: np.ndarray,
    kpts1: np.ndarray,
    matches: np.ndarray,
) -> List[GluedPair]:
    """
    Map matched index pairs onto keypoint coordinates.

    Args:
        kpts0: keypoints of image A
        kpts1: keypoints of image B
        matches: (M, 2) rows of (idx_a, idx_b)
    """

    pts0 = _as_points(kpts0, "kpts0")
    pts1 = _as_points(kpts1, "kpts1")

    m = np.asarray(matches)
    if m.size == 0:
        return []
    if m.ndim != 2 or m.shape[1] != 2:
        raise ShapeMismatchError(f"Expected matches shaped (M, 2), got {m.shape}")
    m = m.astype(np.int64)

    idx0 = m[:, 0]
    idx1 = m[:, 1]
    # numpy would silently wrap negative indices
    if idx0.min() < 0 or idx0.max() >= len(pts0):
        raise ShapeMismatchError(f"Match index into kpts0 out of range [0, {len(pts0)})")
    if idx1.min() < 0 or idx1.max() >= len(pts1):
        raise ShapeMismatchError(f"Match index into kpts1 out of range [0, {len(pts1)})")

    a = pts0[idx0]
    b = pts1[idx1]
    return [
        GluedPair(from_x=int(ax), from_y=int(ay), to_x=int(bx), to_y=int(by))
        for (ax, ay), (bx, by) in zip(a, b)
    ]
