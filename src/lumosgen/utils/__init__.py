"""Shared utilities."""

from lumosgen.utils.logging import configure_logging

__all__ = ["configure_logging"]
