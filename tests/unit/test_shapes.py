import math
import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from prismatic_core.errors import ConfigurationError
from prismatic_renderer.models import FractalType, NoiseConfig, RenderRegion
from prismatic_renderer.shapes import (
    Conic,
    Cross,
    Diamond,
    FractalNoise,
    Hourglass,
    Linear,
    LinearPoints,
    Noise,
    Polygon,
    Radial,
    Spiral,
    Spotlight,
    UniformNoise,
    prepare,
    progress,
)

REGION = RenderRegion.full(100, 100)


class LinearTests(unittest.TestCase):
    def test_angle_zero_runs_left_to_right(self):
        self.assertAlmostEqual(progress(0, 50, Linear(), REGION), 0.0)
        self.assertAlmostEqual(progress(50, 7, Linear(), REGION), 0.5)
        self.assertAlmostEqual(progress(100, 93, Linear(), REGION), 1.0)

    def test_quarter_turn_runs_top_to_bottom(self):
        shape = Linear(angle=math.pi / 2)
        self.assertAlmostEqual(progress(13, 0, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(77, 100, shape, REGION), 1.0)

    def test_angle_is_reduced_modulo_two_pi(self):
        self.assertEqual(Linear(angle=4 * math.pi), Linear(angle=0.0))
        self.assertEqual(Linear(angle=-2 * math.pi).angle, 0.0)

    def test_length_stretches(self):
        self.assertAlmostEqual(progress(100, 0, Linear(length=2.0), REGION), 0.75)

    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            Linear(length=0.0)
        with self.assertRaises(ConfigurationError):
            Linear(angle=float("nan"))
        with self.assertRaises(ConfigurationError):
            Linear(center=(float("inf"), 0.0))

    def test_points(self):
        shape = LinearPoints(start=(10, 10), end=(10, 90))
        self.assertAlmostEqual(progress(55, 10, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(3, 50, shape, REGION), 0.5)
        with self.assertRaises(ConfigurationError):
            LinearPoints(start=(5, 5), end=(5, 5))


class RadialTests(unittest.TestCase):
    def test_distance_over_radius(self):
        shape = Radial(center=(0, 0), outer_radius=10.0)
        self.assertAlmostEqual(progress(0, 0, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(3, 4, shape, REGION), 0.5)

    def test_inner_radius_and_zoom(self):
        shape = Radial(center=(0, 0), inner_radius=5.0, outer_radius=10.0, zoom=1.5)
        self.assertAlmostEqual(progress(5, 0, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(15, 0, shape, REGION), 1.0)

    def test_default_radius_reaches_corners(self):
        self.assertAlmostEqual(progress(100, 100, Radial(), REGION), 1.0)

    def test_coincident_points_fail(self):
        with self.assertRaises(ConfigurationError):
            Radial.from_points((20, 20), (20, 20))
        with self.assertRaises(ConfigurationError):
            Radial(inner_radius=4.0, outer_radius=4.0)

    def test_from_points(self):
        shape = Radial.from_points((10, 10), (10, 30))
        self.assertAlmostEqual(progress(10, 20, shape, REGION), 0.5)


class PeriodicShapeTests(unittest.TestCase):
    def test_conic_seam_sits_at_offset_angle(self):
        shape = Conic(center=(50, 50), angle=math.pi / 2)
        self.assertAlmostEqual(progress(50, 90, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(10, 50, shape, REGION), 0.25)
        self.assertTrue(prepare(shape, REGION).periodic)

    def test_conic_stays_in_unit_interval(self):
        x, y = np.meshgrid(np.arange(100.0), np.arange(100.0))
        values = progress(x, y, Conic(), REGION)
        self.assertGreaterEqual(values.min(), 0.0)
        self.assertLess(values.max(), 1.0)

    def test_spiral_winds_with_radius(self):
        flat = Spiral(center=(50, 50), wind_count=0.0)
        wound = Spiral(center=(50, 50), wind_count=0.5)
        self.assertAlmostEqual(progress(90, 50, flat, REGION), 0.0)
        reach = math.hypot(100, 100) / 2
        expected = (40 / reach) * 0.5
        self.assertAlmostEqual(progress(90, 50, wound, REGION), expected)

    def test_spiral_allows_negative_winding(self):
        value = progress(70, 50, Spiral(center=(50, 50), wind_count=-1.0), REGION)
        self.assertGreaterEqual(value, 0.0)
        self.assertLess(value, 1.0)

    def test_spiral_rejects_bad_curviness(self):
        with self.assertRaises(ConfigurationError):
            Spiral(curviness=0.0)


class PolygonTests(unittest.TestCase):
    def test_side_count_floor(self):
        for sides in (0, 1, 2):
            with self.assertRaises(ConfigurationError):
                Polygon(sides=sides)
        for sides in (True, 4.0, "5"):
            with self.assertRaises(ConfigurationError):
                Polygon(sides=sides)

    def test_numpy_side_count_accepted(self):
        shape = Polygon(sides=np.int64(5))
        self.assertEqual(shape.sides, 5)
        self.assertIs(type(shape.sides), int)

    def test_edges_reach_one(self):
        shape = Polygon(sides=4, center=(50, 50), angle=math.pi / 4)
        # Edge normals of this square point along the axes.
        self.assertAlmostEqual(progress(100, 50, shape, REGION), 1.0)
        self.assertAlmostEqual(progress(50, 0, shape, REGION), 1.0)
        self.assertAlmostEqual(progress(100, 0, shape, REGION), 1.0)
        self.assertAlmostEqual(progress(50, 50, shape, REGION), 0.0)

    def test_zoom_scales_boundary(self):
        shape = Polygon(sides=6, center=(50, 50), zoom=2.0)
        inner = progress(60, 50, shape, REGION)
        plain = progress(60, 50, Polygon(sides=6, center=(50, 50)), REGION)
        self.assertAlmostEqual(inner * 2.0, plain)


class BandTests(unittest.TestCase):
    def test_diamond_is_manhattan(self):
        shape = Diamond(center=(50, 50))
        self.assertAlmostEqual(progress(60, 70, shape, REGION), 0.6)
        self.assertAlmostEqual(progress(100, 50, shape, REGION), 1.0)

    def test_cross_uses_smaller_offset(self):
        shape = Cross(center=(50, 50))
        self.assertAlmostEqual(progress(50, 5, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(70, 60, shape, REGION), 0.2)

    def test_repeats_fold_into_bands(self):
        shape = Diamond(center=(50, 50), repeats=2.0)
        self.assertAlmostEqual(progress(75, 50, shape, REGION), 1.0)
        self.assertAlmostEqual(progress(100, 50, shape, REGION), 0.0)

    def test_rotation(self):
        shape = Diamond(center=(50, 50), angle=math.pi / 2)
        self.assertAlmostEqual(progress(60, 70, shape, REGION), 0.6)

    def test_invalid_repeats(self):
        with self.assertRaises(ConfigurationError):
            Cross(repeats=0.0)
        with self.assertRaises(ConfigurationError):
            Diamond(zoom=-1.0)


class SpotlightTests(unittest.TestCase):
    def test_dark_at_both_foci(self):
        shape = Spotlight(focus_a=(20, 50), focus_b=(80, 50), radius_a=30, radius_b=30)
        self.assertAlmostEqual(progress(20, 50, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(80, 50, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(50, 50, shape, REGION), 1.0)

    def test_far_field_saturates(self):
        shape = Spotlight(focus_a=(40, 50), focus_b=(60, 50), radius_a=10, radius_b=10)
        self.assertAlmostEqual(progress(0, 0, shape, REGION), 1.0)

    def test_validation(self):
        with self.assertRaises(ConfigurationError):
            Spotlight(focus_a=(1, 1), focus_b=(1, 1))
        with self.assertRaises(ConfigurationError):
            Spotlight(focus_a=(1, 1), focus_b=(2, 2), radius_a=0.0)
        self.assertAlmostEqual(Spotlight(focus_a=(0, 0), focus_b=(3, 4)).radius_b, 5.0)


class HourglassTests(unittest.TestCase):
    def test_pinched_at_centerline(self):
        shape = Hourglass(center=(50, 50), roundness=0.0)
        self.assertAlmostEqual(progress(50, 10, shape, REGION), 0.0)
        self.assertAlmostEqual(progress(50, 50, shape, REGION), 0.0)

    def test_diagonal_matches_diamond_metric(self):
        shape = Hourglass(center=(50, 50))
        self.assertAlmostEqual(progress(60, 60, shape, REGION), 0.4)

    def test_wide_across_the_neck(self):
        self.assertGreaterEqual(progress(60, 50, Hourglass(center=(50, 50)), REGION), 1.0)

    def test_rotation_moves_the_centerline(self):
        shape = Hourglass(center=(50, 50), angle=math.pi / 2, roundness=0.0)
        self.assertAlmostEqual(progress(10, 50, shape, REGION), 0.0)

    def test_validation(self):
        with self.assertRaises(ConfigurationError):
            Hourglass(roundness=-0.5)
        with self.assertRaises(ConfigurationError):
            Hourglass(zoom=0.0)


class NoiseShapeTests(unittest.TestCase):
    def test_noise_progress_in_unit_interval(self):
        x, y = np.meshgrid(np.arange(100.0), np.arange(100.0))
        for shape in (Noise(scale_x=0.05, scale_y=0.05), UniformNoise(scale_x=0.05, scale_y=0.05), FractalNoise()):
            values = progress(x, y, shape, REGION)
            self.assertGreaterEqual(values.min(), 0.0, shape)
            self.assertLessEqual(values.max(), 1.0, shape)

    def test_noise_is_deterministic(self):
        shape = FractalNoise(noise=NoiseConfig(fractal_type=FractalType.RIDGED, seed=99), scale_x=0.03)
        self.assertEqual(progress(17, 23, shape, REGION), progress(17, 23, shape, REGION))

    def test_fractal_noise_requires_fractal_type(self):
        with self.assertRaises(ConfigurationError):
            FractalNoise(noise=NoiseConfig())

    def test_rotation_about_center_keeps_center_fixed(self):
        plain = Noise(scale_x=0.05, scale_y=0.05)
        turned = Noise(scale_x=0.05, scale_y=0.05, angle=1.0)
        self.assertAlmostEqual(progress(50, 50, plain, REGION), progress(50, 50, turned, REGION))
        self.assertNotAlmostEqual(progress(10, 80, plain, REGION), progress(10, 80, turned, REGION))


if __name__ == "__main__":
    unittest.main()
