"""
Версия curly для `curly --version`.
"""

from __future__ import annotations

from importlib import metadata

DISTRIBUTION = "curly-templates"

# Запуск из исходников без установки (python -m curly.cli)
UNKNOWN_VERSION = "0.0.0"


def tool_version() -> str:
    """Версия установленного дистрибутива curly-templates."""
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return UNKNOWN_VERSION


__all__ = ["DISTRIBUTION", "UNKNOWN_VERSION", "tool_version"]
