from __future__ import annotations


class AntPathError(Exception):
    """Base class for all errors raised by antpath."""


class ConfigurationError(AntPathError, ValueError):
    """Invalid option, node index or matrix shape. Raised before any iteration runs."""


class DegenerateInputError(AntPathError, ValueError):
    """Distances that would make the heuristic or the path cost undefined."""
