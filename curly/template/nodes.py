"""
AST-узлы шаблона.

Определяет иерархию неизменяемых классов узлов для представления
структуры шаблона: текст, подстановки, условия, циклы и объявление ключей.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..expressions.model import Expr


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть.
    """
    text: str


@dataclass(frozen=True)
class InterpolationNode(TemplateNode):
    """Подстановка {expr}: значение выражения выводится как текст."""
    expression: Expr
    position: int


@dataclass(frozen=True)
class ConditionalNode(TemplateNode):
    """
    Условный блок {#if cond}...{:else}...{/}.

    else_body равен None, если ветки {:else} нет. Цепочка {:else if cond}
    представлена как else_body из одного вложенного ConditionalNode.
    """
    condition: Expr
    then_body: Tuple[TemplateNode, ...]
    else_body: Optional[Tuple[TemplateNode, ...]]
    position: int


@dataclass(frozen=True)
class LoopNode(TemplateNode):
    """
    Цикл {#for var in expr}...{/}.

    На каждой итерации var привязывается к элементу в дочернем скоупе.
    """
    variable: str
    iterable: Expr
    body: Tuple[TemplateNode, ...]
    position: int


@dataclass(frozen=True)
class KeysNode(TemplateNode):
    """
    Объявление {@keys a b c}.

    Ничего не выводит; перед рендерингом все перечисленные ключи
    проверяются в корневом окружении.
    """
    names: Tuple[str, ...]
    position: int


# Алиас для последовательности узлов (AST)
TemplateAST = Tuple[TemplateNode, ...]


__all__ = [
    "TemplateNode",
    "TextNode",
    "InterpolationNode",
    "ConditionalNode",
    "LoopNode",
    "KeysNode",
    "TemplateAST",
]
