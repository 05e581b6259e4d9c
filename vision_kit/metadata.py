from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Union

COCO_CLASSES = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear", "hair drier",
    "toothbrush",
)


def load_class_names(metadata_path: Union[str, Path]) -> Dict[int, str]:
    """
    Load class names from the `names:` block of an Ultralytics-style metadata.yaml.

        names:
          0: person
          1: bicycle
          ...

    Only that block is parsed, so no YAML dependency is needed.
    """

    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue
            # a new top-level key ends the block
            if not raw[:1].isspace():
                break
            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            if not left.isdigit():
                continue
            names[int(left)] = right.strip().strip("'").strip('"')

    return names


def class_name(class_id: int, names: Optional[Mapping[int, str]] = None) -> str:
    """Label for a class id; COCO names by default, the id itself when unknown."""
    if names is not None:
        return names.get(class_id, str(class_id))
    if 0 <= class_id < len(COCO_CLASSES):
        return COCO_CLASSES[class_id]
    return str(class_id)
