"""Service scaffolding, capability discovery and project assessment."""

__version__ = "1.0.0"

__all__ = ["__version__"]
