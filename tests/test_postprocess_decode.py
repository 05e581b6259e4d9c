import unittest

import numpy as np

from vision_kit.errors import ShapeMismatchError
from vision_kit.postprocess import DetectionDecodeConfig, DetectionDecoder, decode_detections


def _anchors_output(boxes, class_scores) -> np.ndarray:
    """Build a (1, 4 + C, A) tensor from per-anchor boxes and scores."""
    b = np.asarray(boxes, dtype=np.float32).T
    s = np.asarray(class_scores, dtype=np.float32).T
    return np.vstack([b, s])[None, ...]


class TestDetectionDecode(unittest.TestCase):
    def test_decode_anchors_layout(self) -> None:
        p = _anchors_output(
            boxes=[
                [100, 100, 20, 40],
                [300, 300, 10, 10],
                [320, 320, 64, 64],
            ],
            class_scores=[
                [0.1, 0.9, 0.2],  # class 1
                [0.4, 0.1, 0.3],  # below threshold
                [0.6, 0.6, 0.1],  # tie -> first class
            ],
        )
        boxes = decode_detections(p, width=1280, height=640, model_width=640, model_height=640)

        self.assertEqual(len(boxes), 2)
        first, second = boxes
        self.assertEqual(first.class_id, 1)
        self.assertAlmostEqual(first.prob, 0.9, places=6)
        # x axis scaled by 2, y axis by 1
        self.assertEqual(first.as_xyxy(), (180.0, 80.0, 220.0, 120.0))
        self.assertEqual(second.class_id, 0)
        self.assertAlmostEqual(second.prob, 0.6, places=6)
        self.assertEqual(second.as_xyxy(), (576.0, 288.0, 704.0, 352.0))

    def test_threshold_is_inclusive(self) -> None:
        p = _anchors_output(boxes=[[10, 10, 4, 4]], class_scores=[[0.5, 0.0]])
        boxes = decode_detections(p, 64, 64, 64, 64)
        self.assertEqual(len(boxes), 1)

        strict = DetectionDecoder(DetectionDecodeConfig(conf_threshold=0.6))
        self.assertEqual(strict.process(p, image_size=(64, 64), model_size=(64, 64)), [])

    def test_boxes_clamped_to_image(self) -> None:
        p = _anchors_output(
            boxes=[[5, 60, 20, 20], [630, 5, 40, 30]],
            class_scores=[[0.9], [0.8]],
        )
        boxes = decode_detections(p, 640, 640, 640, 640)
        self.assertEqual(boxes[0].as_xyxy(), (0.0, 50.0, 15.0, 70.0))
        self.assertEqual(boxes[1].as_xyxy(), (610.0, 0.0, 640.0, 20.0))

    def test_output_keeps_anchor_order(self) -> None:
        p = _anchors_output(
            boxes=[[10, 10, 2, 2], [20, 20, 2, 2], [30, 30, 2, 2]],
            class_scores=[[0.6, 0.0], [0.0, 0.95], [0.8, 0.0]],
        )
        boxes = decode_detections(p, 64, 64, 64, 64)
        self.assertEqual([b.prob for b in boxes], [np.float32(0.6), np.float32(0.95), np.float32(0.8)])

    def test_unbatched_layout_accepted(self) -> None:
        p = _anchors_output(boxes=[[10, 10, 4, 4]], class_scores=[[0.0, 0.0, 0.7]])[0]
        boxes = decode_detections(p, 64, 64, 64, 64)
        self.assertEqual(len(boxes), 1)
        self.assertEqual(boxes[0].class_id, 2)

    def test_no_anchors(self) -> None:
        self.assertEqual(decode_detections(np.zeros((1, 84, 0), dtype=np.float32), 64, 64, 64, 64), [])

    def test_shape_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            decode_detections(np.zeros((2, 84, 10), dtype=np.float32), 64, 64, 64, 64)
        with self.assertRaises(ShapeMismatchError):
            decode_detections(np.zeros((84,), dtype=np.float32), 64, 64, 64, 64)
        with self.assertRaises(ShapeMismatchError):
            decode_detections(np.zeros((1, 4, 10), dtype=np.float32), 64, 64, 64, 64)
        with self.assertRaises(ShapeMismatchError):
            decode_detections(np.zeros((1, 1, 84, 10), dtype=np.float32), 64, 64, 64, 64)


if __name__ == "__main__":
    unittest.main()
