import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from prismatic_core.errors import ConfigurationError
from prismatic_renderer.orchestrator import partition_strips


class PartitionTests(unittest.TestCase):
    def test_last_strip_absorbs_remainder(self):
        self.assertEqual(partition_strips(10, 3), [(0, 3), (3, 6), (6, 10)])

    def test_bands_are_contiguous_and_cover_height(self):
        for height in (1, 7, 64, 481):
            for count in (1, 2, 5, 10):
                bands = partition_strips(height, count)
                self.assertEqual(bands[0][0], 0)
                self.assertEqual(bands[-1][1], height)
                for (_, stop), (start, _) in zip(bands, bands[1:]):
                    self.assertEqual(stop, start)
                self.assertTrue(all(stop > start for start, stop in bands))

    def test_count_clamped_to_height(self):
        bands = partition_strips(3, 16)
        self.assertEqual(bands, [(0, 1), (1, 2), (2, 3)])

    def test_empty_height(self):
        self.assertEqual(partition_strips(0, 4), [])

    def test_non_positive_count_fails(self):
        for count in (0, -1):
            with self.assertRaises(ConfigurationError):
                partition_strips(10, count)


if __name__ == "__main__":
    unittest.main()
