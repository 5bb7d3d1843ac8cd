"""
curly: минимальный шаблонизатор с директивами в фигурных скобках.

    {@keys title users}
    <h1>{title}</h1>
    {#for u in users}{#if u[admin]}* {/}{u[name]}
    {/}
"""

from __future__ import annotations

from .environment import Scope
from .errors import (
    ConfigError,
    CurlyUserError,
    MissingKeyError,
    ParseError,
    ScanError,
    TemplateRenderError,
    TemplateSyntaxError,
    TypeMismatchError,
    UndefinedVariableError,
)
from .template import Template, compile_template, render_template
from .values import Value, ValueKind, to_value

__all__ = [
    "Scope",
    "Template",
    "Value",
    "ValueKind",
    "compile_template",
    "render_template",
    "to_value",
    "ConfigError",
    "CurlyUserError",
    "MissingKeyError",
    "ParseError",
    "ScanError",
    "TemplateRenderError",
    "TemplateSyntaxError",
    "TypeMismatchError",
    "UndefinedVariableError",
]
