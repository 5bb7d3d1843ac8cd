"""
Процессор шаблонов.

Публичный API, объединяющий сканер, парсер и вычислитель:
шаблон компилируется один раз и может рендериться многократно
с разными окружениями.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Tuple, Union

from ..environment import Scope
from .evaluator import TemplateEvaluator
from .nodes import TemplateAST
from .parser import ParseWarning, TemplateParser

logger = logging.getLogger(__name__)

EnvironmentLike = Union[Scope, Mapping[str, Any]]


@dataclass(frozen=True)
class Template:
    """
    Скомпилированный шаблон.

    Неизменяем, рендеринг является чистой функцией от (AST, окружение).
    """
    ast: TemplateAST
    declared_keys: Tuple[str, ...] = ()
    warnings: Tuple[ParseWarning, ...] = ()

    def render(self, environment: EnvironmentLike) -> str:
        """
        Рендерит шаблон в окружении.

        Args:
            environment: Корневой скоуп или обычный словарь Python

        Returns:
            Итоговый текст; при ошибке вывод не возвращается вовсе

        Raises:
            MissingKeyError, UndefinedVariableError, TypeMismatchError
        """
        scope = environment if isinstance(environment, Scope) else Scope.from_mapping(environment)
        logger.debug("Rendering template with %d top-level nodes", len(self.ast))
        return TemplateEvaluator().evaluate(self.ast, scope)


def compile_template(text: str) -> Template:
    """
    Компилирует текст шаблона.

    Raises:
        ScanError: Несбалансированные фигурные скобки
        ParseError: Ошибка в директиве или структуре блоков
    """
    parser = TemplateParser(text)
    ast = parser.parse()
    logger.debug(
        "Compiled template: %d nodes, keys=%s, warnings=%d",
        len(ast), parser.declared_keys, len(parser.warnings),
    )
    return Template(
        ast=ast,
        declared_keys=tuple(parser.declared_keys),
        warnings=tuple(parser.warnings),
    )


def render_template(text: str, environment: EnvironmentLike) -> str:
    """Компилирует и сразу рендерит шаблон."""
    return compile_template(text).render(environment)


__all__ = ["Template", "EnvironmentLike", "compile_template", "render_template"]
