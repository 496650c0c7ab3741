import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from prismatic_core.config import AppConfig, load_config, save_config, validate_config
from prismatic_core.errors import ConfigurationError


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertIsNone(cfg.render.strip_count)
            self.assertIsNone(cfg.render.posterize_levels)
            self.assertEqual(cfg.noise.octaves, 3)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.render.strip_count = 6
            cfg.render.posterize_levels = 5
            cfg.noise.seed = 1337
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.render.strip_count, 6)
            self.assertEqual(reloaded.render.posterize_levels, 5)
            self.assertEqual(reloaded.noise.seed, 1337)

    def test_migrate_v1_shape(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            old = {"strip_count": 4, "posterize_levels": 3, "noise_seed": 9, "logging": {"level": "debug"}}
            path.write_text(json.dumps(old), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.config_version, 2)
            self.assertEqual(cfg.render.strip_count, 4)
            self.assertEqual(cfg.render.posterize_levels, 3)
            self.assertEqual(cfg.noise.seed, 9)
            self.assertEqual(cfg.logging.level, "DEBUG")

    def test_unreadable_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.render.dither_strength, 0.0)

    def test_invalid_values_rejected(self):
        cfg = AppConfig()
        cfg.render.strip_count = 0
        with self.assertRaises(ConfigurationError):
            validate_config(cfg)

        cfg = AppConfig()
        cfg.render.posterize_levels = 0
        with self.assertRaises(ConfigurationError):
            validate_config(cfg)

        cfg = AppConfig()
        cfg.noise.lacunarity = float("nan")
        with self.assertRaises(ConfigurationError):
            validate_config(cfg)

    def test_save_refuses_invalid_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = AppConfig()
            cfg.render.dither_strength = -1.0
            with self.assertRaises(ConfigurationError):
                save_config(cfg, path)
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
