from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .errors import ShapeMismatchError
from .types import BoundingBox


@dataclass(frozen=True)
class DetectionDecodeConfig:
    """
    Decode settings for YOLOv8-style exports.
    """

    conf_threshold: float = 0.5


class DetectionDecoder:
    """
    Decode a raw YOLOv8 output into image-space boxes.

    Supported layout (per image):
    - (1, 4 + C, A) or (4 + C, A): rows are [cx, cy, w, h, class_scores...],
      one column per anchor, e.g. 84 x 8400 for the COCO export.

    Boxes come back in anchor order without NMS; ranking is left to `nms()`.
    """

    def __init__(self, cfg: DetectionDecodeConfig = DetectionDecodeConfig()):
        self.cfg = cfg

    def process(
        self,
        output: np.ndarray,
        image_size: Tuple[int, int],
        model_size: Tuple[int, int],
    ) -> List[BoundingBox]:
        """
        Args:
            output: model output for a single image
            image_size: (width, height) of the source image
            model_size: (width, height) the model was run at
        """

        boxes_cxcywh, scores, class_ids = self._decode(output)
        if boxes_cxcywh.size == 0:
            return []

        keep = scores >= self.cfg.conf_threshold
        boxes_cxcywh, scores, class_ids = boxes_cxcywh[keep], scores[keep], class_ids[keep]
        if boxes_cxcywh.size == 0:
            return []

        boxes_xyxy = self._scale_boxes(boxes_cxcywh, image_size, model_size)

        return [
            BoundingBox(
                x1=float(x1),
                y1=float(y1),
                x2=float(x2),
                y2=float(y2),
                class_id=int(cls_id),
                prob=float(score),
            )
            for (x1, y1, x2, y2), score, cls_id in zip(boxes_xyxy, scores, class_ids)
        ]

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _decode(self, output: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Split the (4 + C, A) layout into (A, 4) center boxes, scores and class ids.
        """

        p = np.asarray(output)
        if p.ndim == 3:
            if p.shape[0] != 1:
                raise ShapeMismatchError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
            p = p[0]
        if p.ndim != 2:
            raise ShapeMismatchError(f"Expected output shaped (1, 4 + C, A), got {np.asarray(output).shape}")
        if p.shape[0] < 5:
            raise ShapeMismatchError(f"Expected at least 4 box rows and 1 class row, got shape {p.shape}")

        if p.shape[1] == 0:
            empty = np.empty((0,), dtype=np.float32)
            return np.empty((0, 4), dtype=np.float32), empty, empty.astype(np.int64)

        boxes = p[0:4, :].T.astype(np.float32)  # (A, 4) as cx, cy, w, h
        class_scores = p[4:, :]
        # argmax keeps the first index on ties
        class_ids = np.argmax(class_scores, axis=0)
        scores = class_scores[class_ids, np.arange(class_scores.shape[1])].astype(np.float32)
        return boxes, scores, class_ids

    def _scale_boxes(
        self,
        boxes: np.ndarray,
        image_size: Tuple[int, int],
        model_size: Tuple[int, int],
    ) -> np.ndarray:
        """
        Map center boxes from model space to clamped corner boxes in image space.
        """

        width, height = image_size
        model_w, model_h = model_size
        sx = width / model_w
        sy = height / model_h

        cx = boxes[:, 0] * sx
        cy = boxes[:, 1] * sy
        w_box = boxes[:, 2] * sx
        h_box = boxes[:, 3] * sy

        x1 = np.maximum(cx - w_box / 2, 0.0)
        y1 = np.maximum(cy - h_box / 2, 0.0)
        x2 = np.minimum(cx + w_box / 2, float(width))
        y2 = np.minimum(cy + h_box / 2, float(height))
        return np.stack([x1, y1, x2, y2], axis=1)


def decode_detections(
    output: np.ndarray,
    width: int,
    height: int,
    model_width: int,
    model_height: int,
    conf_threshold: float = 0.5,
) -> List[BoundingBox]:
    decoder = DetectionDecoder(DetectionDecodeConfig(conf_threshold=conf_threshold))
    return decoder.process(output, image_size=(width, height), model_size=(model_width, model_height))
