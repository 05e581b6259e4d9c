import math
import unittest

import numpy as np

from vision_kit.errors import ShapeMismatchError
from vision_kit.mesh import FlameInput, decode_flame_output, prepare_flame_input


class TestFlame(unittest.TestCase):
    def test_default_input(self) -> None:
        inp = FlameInput()
        self.assertEqual(inp.shape.shape, (8, 100))
        self.assertEqual(inp.expression.shape, (8, 50))
        self.assertTrue(np.allclose(inp.pose[:, 1], np.radians([30, -30, 85, -48, 10, -15, 0, 0])))
        self.assertTrue(np.all(inp.pose[:, [0, 2, 3, 4, 5]] == 0.0))
        self.assertAlmostEqual(float(inp.pose[2, 1]), math.radians(85), places=6)

    def test_defaults_are_not_shared(self) -> None:
        a = FlameInput()
        b = FlameInput()
        a.shape[0, 0] = 1.0
        self.assertEqual(float(b.shape[0, 0]), 0.0)

    def test_prepare_named_tensors(self) -> None:
        tensors = prepare_flame_input(FlameInput())
        self.assertEqual(list(tensors), ["shape", "expression", "pose", "neck", "eye"])
        shapes = {name: t.shape for name, t in tensors.items()}
        self.assertEqual(
            shapes,
            {"shape": (8, 100), "expression": (8, 50), "pose": (8, 6), "neck": (8, 3), "eye": (8, 6)},
        )
        for t in tensors.values():
            self.assertEqual(t.dtype, np.float32)

    def test_prepare_rejects_wrong_shape(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            prepare_flame_input(FlameInput(neck=np.zeros((8, 4), dtype=np.float32)))

    def test_decode_flattens_batch(self) -> None:
        vertices = np.arange(2 * 5 * 3, dtype=np.float32).reshape(2, 5, 3)
        landmarks = np.ones((2, 68, 3), dtype=np.float32)
        out = decode_flame_output(vertices, landmarks)
        self.assertEqual(out.vertices.shape, (10, 3))
        self.assertEqual(out.landmarks.shape, (136, 3))
        self.assertEqual(out.vertices[5].tolist(), [15.0, 16.0, 17.0])

    def test_decode_rejects_bad_shapes(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            decode_flame_output(np.zeros((2, 5, 2)), np.zeros((2, 68, 3)))
        with self.assertRaises(ShapeMismatchError):
            decode_flame_output(np.zeros((2, 5, 3)), np.zeros((68, 3)))


if __name__ == "__main__":
    unittest.main()
