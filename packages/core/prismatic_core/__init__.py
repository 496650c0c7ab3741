"""Core services for settings, logging, errors, and render budgeting."""

from .config import AppConfig, load_config, save_config, validate_config
from .errors import BoundsError, ConfigurationError, PrismaticError
from .logging_setup import configure_logging, get_logger
from .performance import (
    BudgetStatus,
    PerformanceController,
    PerformanceTargets,
    RenderStats,
    default_strip_count,
)

__all__ = [
    "AppConfig",
    "BoundsError",
    "BudgetStatus",
    "ConfigurationError",
    "PerformanceController",
    "PerformanceTargets",
    "PrismaticError",
    "RenderStats",
    "configure_logging",
    "default_strip_count",
    "get_logger",
    "load_config",
    "save_config",
    "validate_config",
]
