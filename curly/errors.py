"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from CurlyUserError.

Programming errors and bugs should NOT inherit from CurlyUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class CurlyUserError(Exception):
    """
    Base class for all user-facing errors in curly.

    These errors indicate problems that the user can fix:
    malformed templates, missing variables, bad environment data, etc.
    """
    pass


class TemplateSyntaxError(CurlyUserError):
    """Template could not be compiled."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"{message} at offset {position}")


class ScanError(TemplateSyntaxError):
    """Unbalanced directive braces."""
    pass


class ParseError(TemplateSyntaxError):
    """Malformed directive, expression or block structure."""
    pass


class TemplateRenderError(CurlyUserError):
    """Template compiled, but could not be rendered against the environment."""
    pass


class MissingKeyError(TemplateRenderError):
    """One or more keys declared with @keys are absent from the environment."""

    def __init__(self, keys: Iterable[str]):
        self.keys: List[str] = list(keys)
        super().__init__(f"Missing declared keys: {', '.join(self.keys)}")


class UndefinedVariableError(TemplateRenderError):
    """Identifier (or record field) not found during evaluation."""

    def __init__(self, name: str, position: Optional[int] = None):
        self.name = name
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        super().__init__(f"Undefined variable '{name}'{where}")


class TypeMismatchError(TemplateRenderError):
    """Operator applied to values of incompatible kinds."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        super().__init__(f"{message}{where}")


class ConfigError(CurlyUserError):
    """Invalid environment assignment or environment file."""
    pass


__all__ = [
    "CurlyUserError",
    "TemplateSyntaxError",
    "ScanError",
    "ParseError",
    "TemplateRenderError",
    "MissingKeyError",
    "UndefinedVariableError",
    "TypeMismatchError",
    "ConfigError",
]
