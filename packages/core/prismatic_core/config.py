"""Persistent renderer settings schema and load/save helpers."""

from __future__ import annotations

import json
import math
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigurationError
from .logging_setup import get_logger


CONFIG_VERSION = 2

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RenderSettings:
    strip_count: int | None = None
    posterize_levels: int | None = None
    dither_strength: float = 0.0


@dataclass
class NoiseSettings:
    seed: int = 0
    octaves: int = 3
    lacunarity: float = 2.0
    gain: float = 0.5


@dataclass
class LoggingSettings:
    level: str = "INFO"
    keep_files: int = 7
    console: bool = True
    json: bool = True


@dataclass
class PerformanceSettings:
    render_ms_max: float = 250.0
    cpu_percent_max: float = 90.0
    rss_mb_max: float = 1024.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    render: RenderSettings = field(default_factory=RenderSettings)
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)


DEFAULT_CONFIG = AppConfig()


def config_path() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Prismatic" / "config.json"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Prismatic" / "config.json"
    return Path.home() / ".config" / "prismatic" / "config.json"


def _merge(dataclass_type, raw: dict[str, Any] | None):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in (raw or {}).items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept strip/posterize/dither flat at the top level.
        render = dict(data.get("render", {}) or {})
        for key in ("strip_count", "posterize_levels", "dither_strength"):
            if key in data:
                render.setdefault(key, data.pop(key))
        data["render"] = render
        if "noise_seed" in data:
            noise = dict(data.get("noise", {}) or {})
            noise.setdefault("seed", data.pop("noise_seed"))
            data["noise"] = noise
        data.setdefault("performance", {})
        data["config_version"] = 2

    return data


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def validate_config(cfg: AppConfig) -> AppConfig:
    render = cfg.render
    _require(
        render.strip_count is None or (isinstance(render.strip_count, int) and render.strip_count >= 1),
        f"render.strip_count must be a positive integer or null, got {render.strip_count!r}",
    )
    _require(
        render.posterize_levels is None
        or (isinstance(render.posterize_levels, int) and render.posterize_levels >= 1),
        f"render.posterize_levels must be a positive integer or null, got {render.posterize_levels!r}",
    )
    _require(
        math.isfinite(float(render.dither_strength)) and render.dither_strength >= 0,
        f"render.dither_strength must be a finite value >= 0, got {render.dither_strength!r}",
    )

    noise = cfg.noise
    _require(int(noise.octaves) >= 1, f"noise.octaves must be >= 1, got {noise.octaves!r}")
    _require(math.isfinite(float(noise.lacunarity)), f"noise.lacunarity must be finite, got {noise.lacunarity!r}")
    _require(math.isfinite(float(noise.gain)), f"noise.gain must be finite, got {noise.gain!r}")

    _require(
        str(cfg.logging.level).upper() in _LOG_LEVELS,
        f"logging.level must be one of {', '.join(_LOG_LEVELS)}, got {cfg.logging.level!r}",
    )

    perf = cfg.performance
    _require(perf.render_ms_max > 0, "performance.render_ms_max must be > 0")
    _require(perf.cpu_percent_max > 0, "performance.cpu_percent_max must be > 0")
    _require(perf.rss_mb_max > 0, "performance.rss_mb_max must be > 0")
    return cfg


def _normalize_logging(cfg: AppConfig) -> None:
    cfg.logging.level = str(cfg.logging.level).upper()
    cfg.logging.keep_files = max(2, int(cfg.logging.keep_files))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        get_logger("config").warning(
            "unreadable settings file %s, using defaults", path, extra={"event": "config_unreadable"}
        )
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        render=_merge(RenderSettings, data.get("render")),
        noise=_merge(NoiseSettings, data.get("noise")),
        logging=_merge(LoggingSettings, data.get("logging")),
        performance=_merge(PerformanceSettings, data.get("performance")),
    )

    _normalize_logging(cfg)
    return validate_config(cfg)


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    validate_config(cfg)
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
