"""
Лексер для разбора выражений внутри директив.

Выполняет токенизацию содержимого между { и }, разбивая его на значимые элементы:
- Числа и строковые литералы
- Идентификаторы и ключевые слова (true, false)
- Операторы (%, *, /, +, ++, -, =, !=, <, <=, >, >=, &, |, !)
- Символы (@, #, :, [, ], (, ), ,)
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from ..errors import ParseError


@dataclass(frozen=True)
class Token:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (NUMBER, STRING, IDENTIFIER, KEYWORD, OPERATOR, SYMBOL, EOF)
        value: Значение токена (для STRING уже без кавычек и экранирования)
        position: Позиция в исходном тексте шаблона
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def describe_token(token: Token) -> str:
    """Описание токена для сообщений об ошибках."""
    if token.type == 'EOF':
        return "end of directive"
    if token.type == 'STRING':
        return f"string \"{token.value}\""
    return f"'{token.value}'"


class ExpressionLexer:
    """
    Лексер для разбиения содержимого директивы на токены.

    Позиции токенов считаются от начала шаблона: вызывающая сторона
    передаёт смещение содержимого директивы.
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        # Пробелы и переводы строк (игнорируем)
        (r'\s+', 'WHITESPACE', True),

        # Строки в двойных кавычках с экранированием
        (r'"(?:[^"\\]|\\.)*"', 'STRING', False),
        (r'"', 'UNTERMINATED', False),

        # Числа; хвост из букв и точек захватывается, чтобы сообщить об ошибке целиком
        (r'[0-9][A-Za-z0-9_.]*', 'NUMBER', False),

        # Идентификаторы: ASCII буквы, цифры, подчёркивания, не с цифры
        (r'[A-Za-z_][A-Za-z0-9_]*', 'IDENTIFIER', False),

        # Операторы: сначала двухсимвольные
        (r'\+\+|!=|<=|>=|[%*/+\-=<>&|!]', 'OPERATOR', False),

        # Символы
        (r'[@#:\[\](),]', 'SYMBOL', False),

        # Неизвестный символ (ошибка)
        (r'.', 'UNKNOWN', False),
    ]

    KEYWORDS = {'true', 'false'}

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str, offset: int = 0) -> List[Token]:
        """
        Разбивает строку на токены.

        Args:
            text: Содержимое директивы
            offset: Позиция начала text в шаблоне

        Returns:
            Список токенов, включая EOF в конце

        Raises:
            ParseError: При неизвестном символе, незакрытой строке или неверном числе
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)
                absolute = offset + position

                if token_type == 'UNKNOWN':
                    raise ParseError(f"Unexpected character '{value}'", absolute)
                if token_type == 'UNTERMINATED':
                    raise ParseError("Unterminated string literal", absolute)

                if not ignore:
                    tokens.append(self._make_token(token_type, value, absolute))

                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=offset + position))
        return tokens

    def _make_token(self, token_type: str, value: str, position: int) -> Token:
        if token_type == 'NUMBER' and not _NUMBER_RE.fullmatch(value):
            raise ParseError(f"Malformed number '{value}'", position)
        if token_type == 'STRING':
            return Token(type='STRING', value=_unescape(value[1:-1]), position=position)
        if token_type == 'IDENTIFIER' and value in self.KEYWORDS:
            return Token(type='KEYWORD', value=value, position=position)
        return Token(type=token_type, value=value, position=position)


__all__ = ["Token", "ExpressionLexer", "describe_token"]
