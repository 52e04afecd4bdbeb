"""CLI command implementations."""

from __future__ import annotations

from .css import css
from .patch import patch


__all__ = ["css", "patch"]
