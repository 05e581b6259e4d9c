"""
Tagged configurations for the supported model families.

Every family follows prepare -> infer -> decode; what differs is the tensor
names and the input normalization, captured here instead of being branched on
at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

from .errors import MissingOutputError
from .tensor import AREA, CUBIC, SYMMETRIC, UNIT, Normalization


@dataclass(frozen=True)
class ModelFamily:
    name: str
    input_names: Tuple[str, ...]
    output_names: Tuple[str, ...]
    # None for families that take no image input
    normalization: Optional[Normalization] = None
    interpolation: Optional[str] = None


YOLO_V8 = ModelFamily(
    name="yolo_v8",
    input_names=("images",),
    output_names=("output0",),
    normalization=UNIT,
    interpolation=CUBIC,
)

MODNET = ModelFamily(
    name="modnet",
    input_names=("input",),
    output_names=("output",),
    normalization=SYMMETRIC,
    interpolation=AREA,
)

FLAME = ModelFamily(
    name="flame",
    input_names=("shape", "expression", "pose", "neck", "eye"),
    output_names=("vertices", "landmarks"),
)

LIGHTGLUE = ModelFamily(
    name="lightglue",
    input_names=("image0", "image1"),
    output_names=("kpts0", "kpts1", "matches0"),
    normalization=UNIT,
)

FAMILIES: Dict[str, ModelFamily] = {f.name: f for f in (YOLO_V8, MODNET, FLAME, LIGHTGLUE)}


def get_family(name: str) -> ModelFamily:
    try:
        return FAMILIES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown model family {name!r}. Known: {sorted(FAMILIES)}") from None


def require_outputs(outputs: Mapping[str, np.ndarray], family: ModelFamily) -> Dict[str, np.ndarray]:
    """
    Pick the family's declared outputs out of an inference response.

    Raises MissingOutputError for the first declared name that is absent.
    """

    picked: Dict[str, np.ndarray] = {}
    for name in family.output_names:
        if name not in outputs:
            raise MissingOutputError(name, available=outputs.keys())
        picked[name] = outputs[name]
    return picked
