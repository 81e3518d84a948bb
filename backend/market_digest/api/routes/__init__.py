"""API routes package."""

from . import health, insights

__all__ = ["health", "insights"]
