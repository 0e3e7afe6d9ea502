"""Plumpkin - runtime import maps for Python modules."""

from .module_resolution import ImportMapResolver

__version__ = "0.1.0"

__all__ = ["ImportMapResolver", "__version__"]
