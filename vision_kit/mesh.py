"""
FLAME head-model inputs and outputs.

The FLAME export takes five parameter blocks for a fixed batch of 8 heads and
returns mesh vertices plus 68 facial landmarks per head.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .errors import ShapeMismatchError
from .types import FlameOutput

FLAME_BATCH = 8

# name -> per-head parameter count, in the order the export declares them
FLAME_PARAMS = {
    "shape": 100,
    "expression": 50,
    "pose": 6,
    "neck": 3,
    "eye": 6,
}


def _default_pose() -> np.ndarray:
    pose = np.zeros((FLAME_BATCH, FLAME_PARAMS["pose"]), dtype=np.float32)
    yaw_degrees = [30.0, -30.0, 85.0, -48.0, 10.0, -15.0, 0.0, 0.0]
    pose[:, 1] = [math.radians(d) for d in yaw_degrees]
    return pose


def _zeros(name: str):
    return lambda: np.zeros((FLAME_BATCH, FLAME_PARAMS[name]), dtype=np.float32)


@dataclass
class FlameInput:
    shape: np.ndarray = field(default_factory=_zeros("shape"))
    expression: np.ndarray = field(default_factory=_zeros("expression"))
    pose: np.ndarray = field(default_factory=_default_pose)
    neck: np.ndarray = field(default_factory=_zeros("neck"))
    eye: np.ndarray = field(default_factory=_zeros("eye"))


def prepare_flame_input(inp: FlameInput) -> Dict[str, np.ndarray]:
    """
    Build the named float32 tensors the FLAME export expects.
    """

    tensors: Dict[str, np.ndarray] = {}
    for name, width in FLAME_PARAMS.items():
        value = np.asarray(getattr(inp, name), dtype=np.float32)
        if value.shape != (FLAME_BATCH, width):
            raise ShapeMismatchError(f"FLAME {name!r} must be shaped ({FLAME_BATCH}, {width}), got {value.shape}")
        tensors[name] = np.ascontiguousarray(value)
    return tensors


def _flatten_points(t: np.ndarray, name: str) -> np.ndarray:
    p = np.asarray(t, dtype=np.float32)
    if p.ndim != 3 or p.shape[2] != 3:
        raise ShapeMismatchError(f"Expected {name} shaped (B, N, 3), got {p.shape}")
    return p.reshape(-1, 3).copy()


def decode_flame_output(vertices: np.ndarray, landmarks: np.ndarray) -> FlameOutput:
    """
    Flatten [B, V, 3] vertices and [B, L, 3] landmarks into point lists.
    """

    return FlameOutput(
        vertices=_flatten_points(vertices, "vertices"),
        landmarks=_flatten_points(landmarks, "landmarks"),
    )
