"""Error taxonomy shared by the renderer and its settings layer."""

from __future__ import annotations


class PrismaticError(Exception):
    """Base class for every error raised by prismatic."""


class ConfigurationError(PrismaticError, ValueError):
    """Invalid parameters; raised before any pixel is written."""


class BoundsError(PrismaticError, ValueError):
    """A render region that does not fit inside its target buffer."""
