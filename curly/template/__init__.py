"""
Движок шаблонов: сканер директив, парсер блоков и вычислитель.
"""

from __future__ import annotations

from .processor import Template, compile_template, render_template
from .parser import ParseWarning, TemplateParser, parse_template
from .scanner import DirectiveSpan, LiteralSpan, TemplateScanner, scan

__all__ = [
    "Template",
    "compile_template",
    "render_template",
    "ParseWarning",
    "TemplateParser",
    "parse_template",
    "DirectiveSpan",
    "LiteralSpan",
    "TemplateScanner",
    "scan",
]
