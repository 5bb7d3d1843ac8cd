"""
Сканер директив.

Находит границы директив {...} в произвольном тексте и отдаёт
последовательность фрагментов: обычный текст или сырое содержимое директивы.
Содержимое директив сканер не интерпретирует.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from ..errors import ScanError


@dataclass(frozen=True)
class LiteralSpan:
    """Текст вне директив, передаётся в вывод как есть."""
    text: str
    position: int


@dataclass(frozen=True)
class DirectiveSpan:
    """
    Содержимое между { и }.

    position указывает на открывающую скобку; само содержимое
    начинается с position + 1.
    """
    content: str
    position: int

    @property
    def content_offset(self) -> int:
        return self.position + 1


Span = Union[LiteralSpan, DirectiveSpan]


class TemplateScanner:
    """
    Ленивый сканер шаблона.

    Единственное состояние: курсор внутри текста. Строковые литералы
    в кавычках внутри директивы пропускаются целиком, поэтому "}" в строке
    не закрывает директиву.
    """

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.position = 0

    def __iter__(self) -> Iterator[Span]:
        return self.spans()

    def spans(self) -> Iterator[Span]:
        """
        Отдаёт фрагменты шаблона по порядку.

        Raises:
            ScanError: Если у '{' нет парной '}'
        """
        while self.position < self.length:
            start = self.text.find("{", self.position)

            if start == -1:
                yield LiteralSpan(self.text[self.position:], self.position)
                self.position = self.length
                return

            if start > self.position:
                yield LiteralSpan(self.text[self.position:start], self.position)

            end = self._find_directive_end(start)
            self.position = end + 1
            yield DirectiveSpan(self.text[start + 1:end], start)

    def _find_directive_end(self, start: int) -> int:
        """Возвращает индекс '}', закрывающей директиву, открытую в start."""
        pos = start + 1
        while pos < self.length:
            char = self.text[pos]

            if char == '"':
                pos = self._skip_string(pos)
                continue
            if char == "}":
                return pos
            if char == "{":
                raise ScanError(f"Unmatched '{{' (nested '{{' at offset {pos})", start)

            pos += 1

        raise ScanError("Unmatched '{'", start)

    def _skip_string(self, pos: int) -> int:
        """Позиция сразу после закрывающей кавычки (или конец текста)."""
        pos += 1
        while pos < self.length:
            char = self.text[pos]
            if char == "\\":
                pos += 2
                continue
            if char == '"':
                return pos + 1
            pos += 1
        return self.length


def scan(text: str) -> Iterator[Span]:
    """
    Удобная функция для сканирования шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Ленивый итератор фрагментов
    """
    return TemplateScanner(text).spans()


__all__ = ["LiteralSpan", "DirectiveSpan", "Span", "TemplateScanner", "scan"]
