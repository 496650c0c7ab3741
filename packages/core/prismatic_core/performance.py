"""Render budgeting and hardware-derived defaults."""

from __future__ import annotations

from dataclasses import dataclass

import psutil

MAX_DEFAULT_STRIPS = 10


def default_strip_count() -> int:
    cpus = psutil.cpu_count(logical=True) or 1
    return max(1, min(MAX_DEFAULT_STRIPS, int(cpus * 0.75)))


@dataclass(frozen=True)
class PerformanceTargets:
    render_ms_max: float = 250.0
    cpu_percent_max: float = 90.0
    rss_mb_max: float = 1024.0


@dataclass(frozen=True)
class RenderStats:
    pixels: int
    strips: int
    duration_s: float

    @property
    def megapixels_per_s(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return self.pixels / self.duration_s / 1_000_000


@dataclass(frozen=True)
class BudgetStatus:
    render_ms: float
    cpu_percent: float
    rss_mb: float
    overloaded: bool
    warning: str | None
    recommended_strips: int


class PerformanceController:
    def __init__(self, targets: PerformanceTargets | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = psutil.Process()
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    def sample(self, stats: RenderStats) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        render_ms = stats.duration_s * 1000.0
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max

        warning = None
        strips = max(1, stats.strips)
        hardware = default_strip_count()

        if overloaded:
            warning = "resource_overload"
            strips = max(1, strips - 1)
        elif render_ms > self.targets.render_ms_max:
            warning = "above_render_budget"
            strips = min(max(hardware, strips), strips + 1)

        return BudgetStatus(
            render_ms=render_ms,
            cpu_percent=cpu,
            rss_mb=rss_mb,
            overloaded=overloaded,
            warning=warning,
            recommended_strips=strips,
        )
