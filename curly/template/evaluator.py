"""
Вычислитель шаблонов.

Обходит AST в порядке документа и собирает итоговый текст.
Каждый вызов владеет своим буфером вывода и цепочкой скоупов,
поэтому один и тот же AST можно вычислять параллельно.
"""

from __future__ import annotations

from typing import Iterable, List

from ..environment import Scope
from ..errors import MissingKeyError, TypeMismatchError
from ..expressions.evaluator import ExpressionEvaluator
from ..values import ValueKind, stringify
from .nodes import (
    ConditionalNode,
    InterpolationNode,
    KeysNode,
    LoopNode,
    TemplateAST,
    TemplateNode,
    TextNode,
)


def check_declared_keys(keys: Iterable[str], scope: Scope) -> None:
    """
    Проверяет, что все ключи из @keys есть в корневом окружении.

    Raises:
        MissingKeyError: Со списком всех отсутствующих ключей сразу
    """
    root = scope.root
    missing = [key for key in keys if key not in root]
    if missing:
        raise MissingKeyError(missing)


class TemplateEvaluator:
    """
    Вычислитель AST шаблона.
    """

    def evaluate(self, ast: TemplateAST, scope: Scope) -> str:
        """
        Вычисляет AST в заданном скоупе.

        Перед выводом проверяются все объявления @keys в дереве,
        так что при отсутствии ключей ничего не вычисляется.

        Raises:
            MissingKeyError: Объявленные ключи отсутствуют
            UndefinedVariableError: Переменная не найдена
            TypeMismatchError: Несовместимые значения
        """
        check_declared_keys(self._collect_keys(ast), scope)

        output: List[str] = []
        self._evaluate_body(ast, scope, output)
        return "".join(output)

    def _collect_keys(self, ast: TemplateAST) -> List[str]:
        keys: List[str] = []

        def collect_from_node(node: TemplateNode) -> None:
            if isinstance(node, KeysNode):
                keys.extend(name for name in node.names if name not in keys)
            elif isinstance(node, ConditionalNode):
                for child in node.then_body:
                    collect_from_node(child)
                for child in node.else_body or ():
                    collect_from_node(child)
            elif isinstance(node, LoopNode):
                for child in node.body:
                    collect_from_node(child)

        for node in ast:
            collect_from_node(node)

        return keys

    def _evaluate_body(self, body: TemplateAST, scope: Scope, output: List[str]) -> None:
        for node in body:
            self._evaluate_node(node, scope, output)

    def _evaluate_node(self, node: TemplateNode, scope: Scope, output: List[str]) -> None:
        if isinstance(node, TextNode):
            output.append(node.text)

        elif isinstance(node, InterpolationNode):
            value = ExpressionEvaluator(scope).evaluate(node.expression)
            output.append(stringify(value, node.position))

        elif isinstance(node, ConditionalNode):
            self._evaluate_conditional(node, scope, output)

        elif isinstance(node, LoopNode):
            self._evaluate_loop(node, scope, output)

        elif isinstance(node, KeysNode):
            # Ключи уже проверены до начала вывода
            pass

        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _evaluate_conditional(self, node: ConditionalNode, scope: Scope, output: List[str]) -> None:
        if ExpressionEvaluator(scope).evaluate_condition(node.condition):
            self._evaluate_body(node.then_body, scope, output)
        elif node.else_body is not None:
            self._evaluate_body(node.else_body, scope, output)

    def _evaluate_loop(self, node: LoopNode, scope: Scope, output: List[str]) -> None:
        iterable = ExpressionEvaluator(scope).evaluate(node.iterable)
        if iterable.kind is not ValueKind.SEQUENCE:
            raise TypeMismatchError(
                f"Cannot iterate over a {iterable.kind.value} in '#for {node.variable}'",
                node.position,
            )

        for item in iterable.payload:
            # Дочерний скоуп живёт ровно одну итерацию
            self._evaluate_body(node.body, scope.child(node.variable, item), output)


__all__ = ["TemplateEvaluator", "check_declared_keys"]
