from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class PipelineConfig:
    conf_threshold: float = 0.5
    iou_threshold: float = 0.45
    apply_nms: bool = True
    # (width, height) the detection model runs at
    model_size: Tuple[int, int] = (640, 640)
    ref_size: int = 512
    # optional (max_w, max_h) bound for matting inputs
    max_size: Optional[Tuple[int, int]] = None
    stride: int = 32
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if len(self.model_size) != 2 or min(self.model_size) <= 0:
            raise ValueError("model_size must be two positive integers")
        if self.ref_size <= 0:
            raise ValueError("ref_size must be > 0")
        if self.max_size is not None and (len(self.max_size) != 2 or min(self.max_size) <= 0):
            raise ValueError("max_size must be two positive integers if provided")
        if self.stride <= 0:
            raise ValueError("stride must be > 0")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1 if provided")


def _require_number(payload: Dict[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_int(payload: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = payload.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _optional_size(payload: Dict[str, Any], key: str, default: Optional[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    value = payload.get(key, default)
    if value is None:
        return None
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or any(isinstance(v, bool) or not isinstance(v, int) for v in value)
    ):
        raise ValueError(f"{key} must be a [width, height] pair of integers")
    return int(value[0]), int(value[1])


def load_pipeline_config(path: Path) -> PipelineConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pipeline config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid pipeline config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Pipeline config must be a JSON object")

    allowed = {
        "conf_threshold",
        "iou_threshold",
        "apply_nms",
        "model_size",
        "ref_size",
        "max_size",
        "stride",
        "max_workers",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown pipeline config keys: {unknown}")

    defaults = PipelineConfig()
    apply_nms = payload.get("apply_nms", defaults.apply_nms)
    if not isinstance(apply_nms, bool):
        raise ValueError("apply_nms must be a boolean")

    model_size = _optional_size(payload, "model_size", defaults.model_size)
    if model_size is None:
        raise ValueError("model_size must not be null")
    ref_size = _optional_int(payload, "ref_size", defaults.ref_size)
    stride = _optional_int(payload, "stride", defaults.stride)
    if ref_size is None or stride is None:
        raise ValueError("ref_size and stride must not be null")

    return PipelineConfig(
        conf_threshold=_require_number(payload, "conf_threshold", defaults.conf_threshold),
        iou_threshold=_require_number(payload, "iou_threshold", defaults.iou_threshold),
        apply_nms=apply_nms,
        model_size=model_size,
        ref_size=ref_size,
        max_size=_optional_size(payload, "max_size", defaults.max_size),
        stride=stride,
        max_workers=_optional_int(payload, "max_workers", defaults.max_workers),
    )
