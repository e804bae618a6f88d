"""Public interface for the remote evaluation adapter."""

from __future__ import annotations

from .client import HttpEvaluator
from .translator import parse_analysis

__all__ = ["HttpEvaluator", "parse_analysis"]
