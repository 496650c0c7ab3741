import math
import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from prismatic_core.errors import ConfigurationError
from prismatic_renderer.angles import TWO_PI, clamp_unit, fold_unit, wrap_angle, wrap_unit


class WrapAngleTests(unittest.TestCase):
    def test_multiples_of_two_pi_collapse_to_zero(self):
        for k in (-3, -1, 0, 1, 2, 7):
            self.assertEqual(wrap_angle(k * TWO_PI), 0.0)

    def test_negative_angles_wrap_forward(self):
        self.assertAlmostEqual(wrap_angle(-math.pi / 2), 1.5 * math.pi)

    def test_result_is_in_range(self):
        for angle in (0.1, 3.0, 6.28, 100.0, -100.0):
            wrapped = wrap_angle(angle)
            self.assertGreaterEqual(wrapped, 0.0)
            self.assertLess(wrapped, TWO_PI)

    def test_non_finite_rejected(self):
        with self.assertRaises(ConfigurationError):
            wrap_angle(float("inf"))
        with self.assertRaises(ConfigurationError):
            wrap_angle(float("nan"))


class UnitIntervalTests(unittest.TestCase):
    def test_wrap_unit_scalar(self):
        self.assertEqual(wrap_unit(1.0), 0.0)
        self.assertAlmostEqual(wrap_unit(1.25), 0.25)
        self.assertAlmostEqual(wrap_unit(-0.25), 0.75)

    def test_wrap_unit_array(self):
        out = wrap_unit(np.array([-1.0, -0.5, 0.0, 0.5, 2.0]))
        np.testing.assert_allclose(out, [0.0, 0.5, 0.0, 0.5, 0.0])
        self.assertTrue(np.all(out < 1.0))

    def test_tiny_negative_never_reaches_one(self):
        self.assertLess(wrap_unit(-1e-20), 1.0)

    def test_fold_unit_mirrors(self):
        self.assertAlmostEqual(fold_unit(0.25), 0.25)
        self.assertAlmostEqual(fold_unit(1.25), 0.75)
        self.assertAlmostEqual(fold_unit(2.25), 0.25)
        np.testing.assert_allclose(fold_unit(np.array([0.5, 1.5, 3.0])), [0.5, 0.5, 1.0])

    def test_clamp_unit(self):
        self.assertEqual(clamp_unit(-2.0), 0.0)
        self.assertEqual(clamp_unit(3.0), 1.0)
        np.testing.assert_array_equal(clamp_unit(np.array([-1.0, 0.5, 2.0])), [0.0, 0.5, 1.0])


if __name__ == "__main__":
    unittest.main()
