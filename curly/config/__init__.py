"""
Environment loading for curly.
"""

from __future__ import annotations

from .load import build_environment, load_environment_file, parse_assignment, parse_value

__all__ = [
    "build_environment",
    "load_environment_file",
    "parse_assignment",
    "parse_value",
]
