"""
Парсер выражений с рекурсивным спуском.

Строит дерево выражения из последовательности токенов.
Поддерживает приоритеты операторов и группировку в скобках.

Грамматика:
expression     → or_expression
or_expression  → and_expression ("|" and_expression)*
and_expression → comparison ("&" comparison)*
comparison     → additive (CMP additive)?          ; сравнения не сцепляются
additive       → multiplicative (("+" | "-" | "++") multiplicative)*
multiplicative → unary (("%" | "*" | "/") unary)*
unary          → ("-" | "!") unary | postfix
postfix        → primary ("[" index_key "]")*
index_key      → IDENTIFIER                        ; голое слово: строковый литерал
               | expression
primary        → NUMBER | STRING | "true" | "false" | call | IDENTIFIER | "(" expression ")"
call           → IDENTIFIER "(" (expression ("," expression)*)? ")"   ; только встроенные: len

CMP            → "=" | "!=" | "<" | "<=" | ">" | ">="
"""

from __future__ import annotations

from typing import List, Optional

from ..errors import ParseError
from ..values import Value
from .lexer import ExpressionLexer, Token, describe_token
from .model import (
    BinaryOp,
    BinaryOperator,
    BUILTIN_FUNCTIONS,
    Call,
    COMPARISON_OPERATORS,
    Expr,
    Index,
    Literal,
    UnaryOp,
    UnaryOperator,
    Variable,
)

_ADDITIVE = {
    "+": BinaryOperator.ADD,
    "-": BinaryOperator.SUBTRACT,
    "++": BinaryOperator.CONCAT,
}

_MULTIPLICATIVE = {
    "%": BinaryOperator.MODULO,
    "*": BinaryOperator.MULTIPLY,
    "/": BinaryOperator.DIVIDE,
}

_COMPARISON = {op.value: op for op in COMPARISON_OPERATORS}

_UNARY = {
    "-": UnaryOperator.NEGATE,
    "!": UnaryOperator.NOT,
}

# Предельная глубина дерева выражения
MAX_EXPRESSION_DEPTH = 100


def expression_depth(expr: Expr) -> int:
    """Глубина дерева выражения; обход без рекурсии."""
    deepest = 0
    stack = [(expr, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in node.children())
    return deepest


class ExpressionParser:
    """
    Парсер выражений с рекурсивным спуском.

    Работает поверх готового списка токенов с курсором, поэтому
    парсер шаблона может сначала разобрать заголовок директивы
    (#if, #for x in, :else) и затем передать остаток сюда.
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != 'EOF':
            raise ValueError("Token list must end with EOF")
        self._tokens = tokens
        self._position = 0

    @classmethod
    def from_text(cls, text: str, offset: int = 0) -> ExpressionParser:
        return cls(ExpressionLexer().tokenize(text, offset))

    def parse(self) -> Expr:
        """
        Разбирает все оставшиеся токены как одно выражение.

        Raises:
            ParseError: При синтаксической ошибке, лишних токенах
                или слишком глубокой вложенности
        """
        if self.is_at_end():
            raise ParseError("Empty expression", self.current().position)

        start = self.current().position
        try:
            result = self.parse_expression()
        except RecursionError:
            raise ParseError("Expression nested too deeply", start) from None
        self.expect_end()

        if expression_depth(result) > MAX_EXPRESSION_DEPTH:
            raise ParseError("Expression nested too deeply", start)
        return result

    def parse_expression(self) -> Expr:
        """Парсит полное выражение (начальный символ грамматики)."""
        return self._parse_or_expression()

    def _parse_or_expression(self) -> Expr:
        left = self._parse_and_expression()

        while self._check_operator("|"):
            op_token = self.advance()
            right = self._parse_and_expression()
            left = BinaryOp(BinaryOperator.OR, left, right, op_token.position)

        return left

    def _parse_and_expression(self) -> Expr:
        left = self._parse_comparison()

        while self._check_operator("&"):
            op_token = self.advance()
            right = self._parse_comparison()
            left = BinaryOp(BinaryOperator.AND, left, right, op_token.position)

        return left

    def _parse_comparison(self) -> Expr:
        """Сравнение: не более одного оператора сравнения на уровень."""
        left = self._parse_additive()

        operator = self._match_operator(_COMPARISON)
        if operator is None:
            return left

        op_token = self._previous()
        right = self._parse_additive()

        current = self.current()
        if current.type == 'OPERATOR' and current.value in _COMPARISON:
            raise ParseError(
                f"Comparison operators cannot be chained: unexpected '{current.value}'",
                current.position,
            )

        return BinaryOp(operator, left, right, op_token.position)

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()

        while True:
            operator = self._match_operator(_ADDITIVE)
            if operator is None:
                return left
            op_token = self._previous()
            right = self._parse_multiplicative()
            left = BinaryOp(operator, left, right, op_token.position)

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()

        while True:
            operator = self._match_operator(_MULTIPLICATIVE)
            if operator is None:
                return left
            op_token = self._previous()
            right = self._parse_unary()
            left = BinaryOp(operator, left, right, op_token.position)

    def _parse_unary(self) -> Expr:
        operator = self._match_operator(_UNARY)
        if operator is not None:
            op_token = self._previous()
            operand = self._parse_unary()  # Правая ассоциативность
            return UnaryOp(operator, operand, op_token.position)

        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        """Индексация связывает сильнее всех операторов: a[b][c]."""
        expr = self._parse_primary()

        while self._check_symbol("["):
            bracket = self.advance()
            key = self._parse_index_key()
            if not self._check_symbol("]"):
                raise ParseError(
                    f"Expected ']' to close index, found {describe_token(self.current())}",
                    self.current().position,
                )
            self.advance()
            expr = Index(expr, key, bracket.position)

        return expr

    def _parse_index_key(self) -> Expr:
        current = self.current()
        # user[id]: обращение к полю "id", а не к переменной id
        if current.type == 'IDENTIFIER' and self._peek_next().type == 'SYMBOL' and self._peek_next().value == "]":
            self.advance()
            return Literal(Value.string(current.value), current.position)
        return self.parse_expression()

    def _parse_primary(self) -> Expr:
        current = self.current()

        if current.type == 'NUMBER':
            self.advance()
            number = float(current.value) if "." in current.value else int(current.value)
            return Literal(Value.number(number), current.position)

        if current.type == 'STRING':
            self.advance()
            return Literal(Value.string(current.value), current.position)

        if current.type == 'KEYWORD':
            self.advance()
            return Literal(Value.boolean(current.value == "true"), current.position)

        if current.type == 'IDENTIFIER':
            self.advance()
            if self._check_symbol("("):
                return self._parse_call(current)
            return Variable(current.value, current.position)

        if self._check_symbol("("):
            self.advance()
            expr = self.parse_expression()
            if not self._check_symbol(")"):
                raise ParseError(
                    f"Expected ')' after grouped expression, found {describe_token(self.current())}",
                    self.current().position,
                )
            self.advance()
            return expr

        if current.type == 'EOF':
            raise ParseError("Unexpected end of expression", current.position)
        raise ParseError(f"Unexpected token {describe_token(current)}", current.position)

    def _parse_call(self, name: Token) -> Call:
        """Разбирает аргументы вызова; '(' ещё не потреблена."""
        arity = BUILTIN_FUNCTIONS.get(name.value)
        if arity is None:
            raise ParseError(f"Unknown function '{name.value}'", name.position)

        self.advance()
        arguments: List[Expr] = []
        if not self._check_symbol(")"):
            arguments.append(self.parse_expression())
            while self._check_symbol(","):
                self.advance()
                arguments.append(self.parse_expression())

        if not self._check_symbol(")"):
            raise ParseError(
                f"Expected ')' after arguments of '{name.value}', found {describe_token(self.current())}",
                self.current().position,
            )
        self.advance()

        if len(arguments) != arity:
            raise ParseError(
                f"Function '{name.value}' expects {arity} argument(s), got {len(arguments)}",
                name.position,
            )
        return Call(name.value, tuple(arguments), name.position)

    # Вспомогательные методы для работы с токенами

    def current(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        return self._tokens[self._position]

    def _peek_next(self) -> Token:
        index = min(self._position + 1, len(self._tokens) - 1)
        return self._tokens[index]

    def _previous(self) -> Token:
        return self._tokens[self._position - 1]

    def is_at_end(self) -> bool:
        return self.current().type == 'EOF'

    def advance(self) -> Token:
        """Продвигает позицию и возвращает предыдущий токен."""
        token = self.current()
        if not self.is_at_end():
            self._position += 1
        return token

    def expect_end(self) -> None:
        """Проверяет, что токенов больше нет."""
        if not self.is_at_end():
            current = self.current()
            raise ParseError(f"Unexpected token {describe_token(current)}", current.position)

    def match_word(self, word: str) -> bool:
        """Проверяет и потребляет идентификатор с заданным текстом (if, for, in, keys...)."""
        current = self.current()
        if current.type == 'IDENTIFIER' and current.value == word:
            self.advance()
            return True
        return False

    def consume_identifier(self, error_message: str) -> Token:
        """Потребляет идентификатор или выбрасывает ошибку."""
        current = self.current()
        if current.type == 'IDENTIFIER':
            return self.advance()
        raise ParseError(f"{error_message}, found {describe_token(current)}", current.position)

    def _check_symbol(self, symbol: str) -> bool:
        current = self.current()
        return current.type == 'SYMBOL' and current.value == symbol

    def _check_operator(self, operator: str) -> bool:
        current = self.current()
        return current.type == 'OPERATOR' and current.value == operator

    def _match_operator(self, table: dict) -> Optional[object]:
        current = self.current()
        if current.type == 'OPERATOR' and current.value in table:
            self.advance()
            return table[current.value]
        return None


def parse_expression(text: str, offset: int = 0) -> Expr:
    """
    Удобная функция для разбора выражения из строки.

    Args:
        text: Текст выражения
        offset: Позиция начала text в шаблоне (для сообщений об ошибках)

    Raises:
        ParseError: При ошибке токенизации или разбора
    """
    return ExpressionParser.from_text(text, offset).parse()


__all__ = ["ExpressionParser", "MAX_EXPRESSION_DEPTH", "expression_depth", "parse_expression"]
