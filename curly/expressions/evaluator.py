"""
Вычислитель выражений.

Проходит по дереву выражения и вычисляет его значение в текущем скоупе.
Все ошибки типов и неизвестные переменные прерывают вычисление сразу.
"""

from __future__ import annotations

from typing import cast

from ..environment import Scope
from ..errors import TypeMismatchError, UndefinedVariableError
from ..values import SCALAR_KINDS, Value, ValueKind, stringify
from .model import (
    ARITHMETIC_OPERATORS,
    BinaryOp,
    BinaryOperator,
    Call,
    EQUALITY_OPERATORS,
    Expr,
    ExprType,
    Index,
    Literal,
    LOGICAL_OPERATORS,
    ORDERING_OPERATORS,
    UnaryOp,
    UnaryOperator,
    Variable,
)


def _kind_mismatch(operator: str, left: Value, right: Value, position: int) -> TypeMismatchError:
    return TypeMismatchError(
        f"Operator '{operator}' cannot be applied to {left.kind.value} and {right.kind.value}",
        position,
    )


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает скоуп и возвращает Value для любого узла выражения.
    """

    def __init__(self, scope: Scope):
        """
        Args:
            scope: Скоуп, в котором ищутся переменные
        """
        self.scope = scope

    def evaluate(self, expr: Expr) -> Value:
        """
        Вычисляет значение выражения.

        Raises:
            UndefinedVariableError: Переменная или поле записи не найдены
            TypeMismatchError: Оператор применён к несовместимым значениям
        """
        expr_type = expr.get_type()

        if expr_type == ExprType.LITERAL:
            return cast(Literal, expr).value
        elif expr_type == ExprType.VARIABLE:
            return self._evaluate_variable(cast(Variable, expr))
        elif expr_type == ExprType.INDEX:
            return self._evaluate_index(cast(Index, expr))
        elif expr_type == ExprType.BINARY:
            return self._evaluate_binary(cast(BinaryOp, expr))
        elif expr_type == ExprType.UNARY:
            return self._evaluate_unary(cast(UnaryOp, expr))
        elif expr_type == ExprType.CALL:
            return self._evaluate_call(cast(Call, expr))
        else:
            raise TypeError(f"Unknown expression type: {expr_type}")

    def evaluate_condition(self, expr: Expr) -> bool:
        """Вычисляет условие #if; допускается только булево значение."""
        value = self.evaluate(expr)
        if value.kind is not ValueKind.BOOLEAN:
            raise TypeMismatchError(
                f"Condition must be a boolean, got {value.kind.value}",
                expr.position,
            )
        return value.payload

    def _evaluate_variable(self, expr: Variable) -> Value:
        value = self.scope.lookup(expr.name)
        if value is None:
            raise UndefinedVariableError(expr.name, expr.position)
        return value

    def _evaluate_index(self, expr: Index) -> Value:
        base = self.evaluate(expr.base)
        key = self.evaluate(expr.key)

        if base.kind is ValueKind.RECORD and key.kind is ValueKind.STRING:
            field = base.payload.get(key.payload)
            if field is None:
                raise UndefinedVariableError(f"{expr.base}[{key.payload}]", expr.position)
            return field

        if base.kind is ValueKind.SEQUENCE and key.kind is ValueKind.NUMBER:
            number = key.payload
            if isinstance(number, float):
                if not number.is_integer():
                    raise TypeMismatchError(f"Sequence index must be an integer, got {stringify(key)}", expr.position)
                number = int(number)
            items = base.payload
            if number < 0 or number >= len(items):
                raise TypeMismatchError(
                    f"Index {number} is out of range for a sequence of length {len(items)}",
                    expr.position,
                )
            return items[number]

        raise TypeMismatchError(
            f"Cannot index a {base.kind.value} with a {key.kind.value}",
            expr.position,
        )

    def _evaluate_binary(self, expr: BinaryOp) -> Value:
        operator = expr.operator

        # Логические операторы вычисляются с коротким замыканием
        if operator in LOGICAL_OPERATORS:
            return self._evaluate_logical(expr)

        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if operator in ARITHMETIC_OPERATORS:
            return self._evaluate_arithmetic(operator, left, right, expr.position)
        elif operator in EQUALITY_OPERATORS:
            return self._evaluate_equality(operator, left, right, expr.position)
        elif operator in ORDERING_OPERATORS:
            return self._evaluate_ordering(operator, left, right, expr.position)
        elif operator == BinaryOperator.CONCAT:
            return self._evaluate_concat(left, right, expr.position)
        else:
            raise TypeError(f"Unknown binary operator: {operator}")

    def _evaluate_arithmetic(self, operator: BinaryOperator, left: Value, right: Value, position: int) -> Value:
        if left.kind is not ValueKind.NUMBER or right.kind is not ValueKind.NUMBER:
            raise _kind_mismatch(operator.value, left, right, position)

        a = left.payload
        b = right.payload

        if operator == BinaryOperator.ADD:
            return Value.number(a + b)
        if operator == BinaryOperator.SUBTRACT:
            return Value.number(a - b)
        if operator == BinaryOperator.MULTIPLY:
            return Value.number(a * b)

        if b == 0:
            raise TypeMismatchError(f"Operator '{operator.value}' by zero", position)
        if operator == BinaryOperator.DIVIDE:
            return Value.number(a / b)
        return Value.number(a % b)

    def _evaluate_equality(self, operator: BinaryOperator, left: Value, right: Value, position: int) -> Value:
        if left.kind is not right.kind or left.kind not in SCALAR_KINDS:
            raise _kind_mismatch(operator.value, left, right, position)

        equal = left.payload == right.payload
        return Value.boolean(equal if operator == BinaryOperator.EQUALS else not equal)

    def _evaluate_ordering(self, operator: BinaryOperator, left: Value, right: Value, position: int) -> Value:
        if left.kind is not right.kind or left.kind not in (ValueKind.NUMBER, ValueKind.STRING):
            raise _kind_mismatch(operator.value, left, right, position)

        a = left.payload
        b = right.payload
        if operator == BinaryOperator.LESS:
            return Value.boolean(a < b)
        if operator == BinaryOperator.LESS_EQUALS:
            return Value.boolean(a <= b)
        if operator == BinaryOperator.GREATER:
            return Value.boolean(a > b)
        return Value.boolean(a >= b)

    def _evaluate_concat(self, left: Value, right: Value, position: int) -> Value:
        if left.kind not in SCALAR_KINDS or right.kind not in SCALAR_KINDS:
            raise _kind_mismatch("++", left, right, position)
        return Value.string(stringify(left) + stringify(right))

    def _evaluate_logical(self, expr: BinaryOp) -> Value:
        left = self._require_boolean(expr.left, expr.operator.value)

        if expr.operator == BinaryOperator.AND and not left:
            return Value.boolean(False)  # Короткое вычисление
        if expr.operator == BinaryOperator.OR and left:
            return Value.boolean(True)  # Короткое вычисление

        return Value.boolean(self._require_boolean(expr.right, expr.operator.value))

    def _require_boolean(self, expr: Expr, operator: str) -> bool:
        value = self.evaluate(expr)
        if value.kind is not ValueKind.BOOLEAN:
            raise TypeMismatchError(
                f"Operator '{operator}' expects booleans, got {value.kind.value}",
                expr.position,
            )
        return value.payload

    def _evaluate_call(self, expr: Call) -> Value:
        arguments = [self.evaluate(arg) for arg in expr.arguments]

        if expr.function == "len":
            (value,) = arguments
            if value.kind not in (ValueKind.SEQUENCE, ValueKind.STRING, ValueKind.RECORD):
                raise TypeMismatchError(
                    f"Function 'len' expects a sequence, string or record, got {value.kind.value}",
                    expr.position,
                )
            return Value.number(len(value.payload))

        raise TypeError(f"Unknown function: {expr.function}")

    def _evaluate_unary(self, expr: UnaryOp) -> Value:
        operand = self.evaluate(expr.operand)

        if expr.operator == UnaryOperator.NEGATE:
            if operand.kind is not ValueKind.NUMBER:
                raise TypeMismatchError(f"Cannot negate a {operand.kind.value}", expr.position)
            return Value.number(-operand.payload)

        if operand.kind is not ValueKind.BOOLEAN:
            raise TypeMismatchError(f"Operator '!' expects a boolean, got {operand.kind.value}", expr.position)
        return Value.boolean(not operand.payload)


__all__ = ["ExpressionEvaluator"]
