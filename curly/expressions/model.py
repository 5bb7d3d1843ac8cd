"""
Модели данных для выражений внутри директив.

Содержит классы для представления узлов дерева выражений:
переменные, литералы, индексация, вызовы встроенных функций,
бинарные и унарные операции.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..values import Value, ValueKind, stringify


class ExprType(Enum):
    """Типы узлов выражения."""
    VARIABLE = "variable"
    LITERAL = "literal"
    INDEX = "index"
    BINARY = "binary"
    UNARY = "unary"
    CALL = "call"


class BinaryOperator(Enum):
    """Бинарные операторы; значение: запись в шаблоне."""
    MODULO = "%"
    MULTIPLY = "*"
    DIVIDE = "/"
    ADD = "+"
    SUBTRACT = "-"
    CONCAT = "++"
    EQUALS = "="
    NOT_EQUALS = "!="
    LESS = "<"
    LESS_EQUALS = "<="
    GREATER = ">"
    GREATER_EQUALS = ">="
    AND = "&"
    OR = "|"


class UnaryOperator(Enum):
    """Унарные операторы."""
    NEGATE = "-"
    NOT = "!"


ARITHMETIC_OPERATORS = frozenset({
    BinaryOperator.MODULO,
    BinaryOperator.MULTIPLY,
    BinaryOperator.DIVIDE,
    BinaryOperator.ADD,
    BinaryOperator.SUBTRACT,
})

EQUALITY_OPERATORS = frozenset({
    BinaryOperator.EQUALS,
    BinaryOperator.NOT_EQUALS,
})

ORDERING_OPERATORS = frozenset({
    BinaryOperator.LESS,
    BinaryOperator.LESS_EQUALS,
    BinaryOperator.GREATER,
    BinaryOperator.GREATER_EQUALS,
})

COMPARISON_OPERATORS = EQUALITY_OPERATORS | ORDERING_OPERATORS

LOGICAL_OPERATORS = frozenset({
    BinaryOperator.AND,
    BinaryOperator.OR,
})


@dataclass(frozen=True)
class Expr(ABC):
    """Базовый абстрактный класс для всех узлов выражения."""

    @abstractmethod
    def get_type(self) -> ExprType:
        """Возвращает тип узла."""
        pass

    def children(self) -> Tuple[Expr, ...]:
        """Непосредственные подвыражения."""
        return ()

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        """Внутренний метод для создания строкового представления."""
        pass


@dataclass(frozen=True)
class Variable(Expr):
    """Ссылка на переменную окружения: name"""
    name: str
    position: int

    def get_type(self) -> ExprType:
        return ExprType.VARIABLE

    def _to_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal(Expr):
    """
    Литерал: число, строка, true/false.

    Ключ индексации в виде голого слова (user[id]) тоже хранится
    как строковый литерал.
    """
    value: Value
    position: int

    def get_type(self) -> ExprType:
        return ExprType.LITERAL

    def _to_string(self) -> str:
        if self.value.kind is ValueKind.STRING:
            escaped = self.value.payload.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return stringify(self.value)


@dataclass(frozen=True)
class Index(Expr):
    """Индексация: base[key]"""
    base: Expr
    key: Expr
    position: int  # позиция '['

    def get_type(self) -> ExprType:
        return ExprType.INDEX

    def children(self) -> Tuple[Expr, ...]:
        return (self.base, self.key)

    def _to_string(self) -> str:
        return f"{self.base}[{self.key}]"


@dataclass(frozen=True)
class BinaryOp(Expr):
    """Бинарная операция: left op right"""
    operator: BinaryOperator
    left: Expr
    right: Expr
    position: int  # позиция оператора

    def get_type(self) -> ExprType:
        return ExprType.BINARY

    def children(self) -> Tuple[Expr, ...]:
        return (self.left, self.right)

    def _to_string(self) -> str:
        return f"({self.left} {self.operator.value} {self.right})"


@dataclass(frozen=True)
class UnaryOp(Expr):
    """Унарная операция: -x, !x"""
    operator: UnaryOperator
    operand: Expr
    position: int

    def get_type(self) -> ExprType:
        return ExprType.UNARY

    def children(self) -> Tuple[Expr, ...]:
        return (self.operand,)

    def _to_string(self) -> str:
        return f"{self.operator.value}{self.operand}"


@dataclass(frozen=True)
class Call(Expr):
    """Вызов встроенной функции: len(xs)"""
    function: str
    arguments: Tuple[Expr, ...]
    position: int  # позиция имени функции

    def get_type(self) -> ExprType:
        return ExprType.CALL

    def children(self) -> Tuple[Expr, ...]:
        return self.arguments

    def _to_string(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.function}({args})"


# Встроенные функции и число их аргументов
BUILTIN_FUNCTIONS = {
    "len": 1,
}


# Объединенный тип для всех узлов выражения
AnyExpr = Union[Variable, Literal, Index, BinaryOp, UnaryOp, Call]


__all__ = [
    "ExprType",
    "BinaryOperator",
    "UnaryOperator",
    "ARITHMETIC_OPERATORS",
    "EQUALITY_OPERATORS",
    "ORDERING_OPERATORS",
    "COMPARISON_OPERATORS",
    "LOGICAL_OPERATORS",
    "Expr",
    "Variable",
    "Literal",
    "Index",
    "BinaryOp",
    "UnaryOp",
    "Call",
    "BUILTIN_FUNCTIONS",
    "AnyExpr",
]
