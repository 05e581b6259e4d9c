import unittest

import numpy as np

from vision_kit.correspondence import extract_correspondences, unique_pairs
from vision_kit.errors import ShapeMismatchError
from vision_kit.types import GluedPair


class TestUniquePairs(unittest.TestCase):
    def test_three_images(self) -> None:
        self.assertEqual(unique_pairs(3), [(0, 1), (0, 2), (1, 2)])

    def test_counts(self) -> None:
        self.assertEqual(unique_pairs(0), [])
        self.assertEqual(unique_pairs(1), [])
        pairs = unique_pairs(6)
        self.assertEqual(len(pairs), 15)
        self.assertTrue(all(i < j for i, j in pairs))
        self.assertEqual(len(set(pairs)), 15)


class TestExtractCorrespondences(unittest.TestCase):
    def setUp(self) -> None:
        self.kpts0 = np.array([[[10, 20], [30, 40], [50, 60]]], dtype=np.int64)
        self.kpts1 = np.array([[[1, 2], [3, 4]]], dtype=np.int64)

    def test_lookup(self) -> None:
        matches = np.array([[2, 0], [0, 1]], dtype=np.int64)
        pairs = extract_correspondences(self.kpts0, self.kpts1, matches)
        self.assertEqual(
            pairs,
            [
                GluedPair(from_x=50, from_y=60, to_x=1, to_y=2),
                GluedPair(from_x=10, from_y=20, to_x=3, to_y=4),
            ],
        )

    def test_unbatched_float_keypoints_are_rounded(self) -> None:
        kpts0 = np.array([[10.4, 19.6]], dtype=np.float32)
        kpts1 = np.array([[0.5, 2.51]], dtype=np.float32)
        (pair,) = extract_correspondences(kpts0, kpts1, np.array([[0, 0]]))
        self.assertEqual(pair, GluedPair(from_x=10, from_y=20, to_x=0, to_y=3))
        self.assertIsInstance(pair.from_x, int)

    def test_no_matches(self) -> None:
        empty = np.empty((0, 2), dtype=np.int64)
        self.assertEqual(extract_correspondences(self.kpts0, self.kpts1, empty), [])

    def test_out_of_range_index(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(self.kpts0, self.kpts1, np.array([[3, 0]]))
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(self.kpts0, self.kpts1, np.array([[0, 2]]))
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(self.kpts0, self.kpts1, np.array([[-1, 0]]))

    def test_bad_shapes(self) -> None:
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(self.kpts0, self.kpts1, np.array([[0, 0, 0]]))
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(np.zeros((2, 3, 2)), self.kpts1, np.array([[0, 0]]))
        with self.assertRaises(ShapeMismatchError):
            extract_correspondences(np.zeros((3,)), self.kpts1, np.array([[0, 0]]))


if __name__ == "__main__":
    unittest.main()
