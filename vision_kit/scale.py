from __future__ import annotations

import math
from typing import Optional, Tuple

from .types import ScalePlan


def _round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; resize targets round half away from zero.
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def _align_down(value: int, stride: int) -> int:
    return value - value % stride


def plan_scale(
    im_h: int,
    im_w: int,
    ref_size: int,
    max_size: Optional[Tuple[int, int]] = None,
    stride: int = 32,
) -> ScalePlan:
    """
    Compute the resize target for an image under reference-size and max-size constraints.

    Args:
        im_h, im_w: original image height/width
        ref_size: reference size the longest side is compared against
        max_size: optional (max_w, max_h) bound
        stride: alignment required by the network; targets are floored to a multiple of it

    The planner never scales past the max-size bound: the final factor is
    min(scale_max, ref_scale). Without a bound this means images are never
    upscaled, only aligned down to the stride.

    Returns:
        ScalePlan with the aligned target dims and the target/original ratios.
    """

    if max_size is not None:
        max_w, max_h = max_size
        scale_max = min(max_w / im_w, max_h / im_h)
    else:
        scale_max = 1.0

    target_h = _round_half_up(im_h * scale_max)
    target_w = _round_half_up(im_w * scale_max)
    longest = max(target_h, target_w)

    if 0 < longest < ref_size:
        ref_scale = ref_size / longest
    else:
        ref_scale = 1.0

    final_scale = min(scale_max, ref_scale)

    final_w = _align_down(_round_half_up(im_w * final_scale), stride)
    final_h = _align_down(_round_half_up(im_h * final_scale), stride)

    return ScalePlan(
        target_width=final_w,
        target_height=final_h,
        x_scale=final_w / im_w,
        y_scale=final_h / im_h,
    )


def get_scale_factor(
    im_h: int,
    im_w: int,
    ref_size: int,
    max_size: Optional[Tuple[int, int]] = None,
    stride: int = 32,
) -> Tuple[float, float]:
    """Return (x_scale, y_scale) so callers can apply the ratio via a generic resize."""
    plan = plan_scale(im_h, im_w, ref_size, max_size=max_size, stride=stride)
    return plan.x_scale, plan.y_scale
