from typing import Dict, List, Sequence

import numpy as np

from .types import BoundingBox


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """
    Intersection-over-Union of two boxes. 0.0 when the union area is zero.
    """

    inter_w = max(0.0, min(a.x2, b.x2) - max(a.x1, b.x1))
    inter_h = max(0.0, min(a.y2, b.y2) - max(a.y1, b.y1))
    inter = inter_w * inter_h
    union = a.width * a.height + b.width * b.height - inter
    if union <= 0.0:
        return 0.0
    return inter / union


def nms_indices(boxes: np.ndarray, scores: np.ndarray, iou_threshold: float) -> np.ndarray:
    """
    Greedy NumPy NMS for a single class. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Boxes whose IoU with a kept box is >= iou_threshold are dropped.
    Returns indices of boxes to keep, highest score first.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    boxes = boxes.astype(np.float64)
    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = (x2 - x1) * (y2 - y1)

    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable")
    keep = []

    while order.size > 0:
        i = order[0]
        keep.append(i)
        rest = order[1:]

        xx1 = np.maximum(x1[i], x1[rest])
        yy1 = np.maximum(y1[i], y1[rest])
        xx2 = np.minimum(x2[i], x2[rest])
        yy2 = np.minimum(y2[i], y2[rest])

        w = np.maximum(0.0, xx2 - xx1)
        h = np.maximum(0.0, yy2 - yy1)
        inter = w * h
        union = areas[i] + areas[rest] - inter
        overlap = np.divide(inter, union, out=np.zeros_like(inter), where=union > 0.0)

        order = rest[overlap < iou_threshold]

    return np.array(keep, dtype=np.int64)


def nms(boxes: Sequence[BoundingBox], iou_threshold: float = 0.45) -> List[BoundingBox]:
    """
    Class-wise greedy NMS. Boxes of different classes never suppress each other.

    Survivors are grouped by class (in order of first appearance), highest
    probability first within each class.
    """

    by_class: Dict[int, List[BoundingBox]] = {}
    for box in boxes:
        by_class.setdefault(box.class_id, []).append(box)

    kept: List[BoundingBox] = []
    for group in by_class.values():
        xyxy = np.array([b.as_xyxy() for b in group], dtype=np.float64)
        scores = np.array([b.prob for b in group], dtype=np.float64)
        for idx in nms_indices(xyxy, scores, iou_threshold):
            kept.append(group[int(idx)])
    return kept
