"""
Парсер шаблонов.

Потребляет поток фрагментов от сканера и строит AST. Блоки #if/#for
разбираются рекурсивно: каждый вызов владеет своим списком дочерних узлов
и возвращает его вызывающему, когда встречает {/} (или {:else}).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import ParseError
from ..expressions.lexer import ExpressionLexer, describe_token
from ..expressions.model import Expr
from ..expressions.parser import ExpressionParser
from .nodes import (
    ConditionalNode,
    InterpolationNode,
    KeysNode,
    LoopNode,
    TemplateAST,
    TemplateNode,
    TextNode,
)
from .scanner import DirectiveSpan, LiteralSpan, Span, TemplateScanner

logger = logging.getLogger(__name__)

# Предельная вложенность блоков #if/#for, включая цепочки {:else if}
MAX_BLOCK_DEPTH = 100


@dataclass(frozen=True)
class ParseWarning:
    """Семантическая проблема, не мешающая компиляции (например, @keys не в начале)."""
    message: str
    position: int

    def __str__(self) -> str:
        return f"{self.message} at offset {self.position}"


@dataclass(frozen=True)
class _OpenBlock:
    """Открытый блок, внутри которого идёт разбор."""
    keyword: str       # "if" или "for"
    position: int      # позиция открывающей директивы
    allows_else: bool


@dataclass(frozen=True)
class _Terminator:
    """Директива, завершающая тело блока: {/}, {:else} или {:else if cond}."""
    kind: str          # "close", "else", "else_if"
    position: int
    condition: Optional[Expr] = None


class TemplateParser:
    """
    Однопроходный рекурсивный парсер шаблона.

    После parse() доступны:
    - warnings: предупреждения о неправильно расположенных @keys
    - declared_keys: все ключи из @keys в порядке объявления
    """

    def __init__(self, text: str):
        self.text = text
        self._spans: Iterator[Span] = TemplateScanner(text).spans()
        self._lexer = ExpressionLexer()
        self._directive_count = 0
        self._block_depth = 0
        self.warnings: List[ParseWarning] = []
        self.declared_keys: List[str] = []

    def parse(self) -> TemplateAST:
        """
        Парсит шаблон в AST.

        Raises:
            ScanError: При несбалансированных фигурных скобках
            ParseError: При синтаксической ошибке в директиве или структуре блоков
        """
        body, _ = self._parse_body(None)
        return body

    def _parse_body(self, opener: Optional[_OpenBlock]) -> Tuple[TemplateAST, Optional[_Terminator]]:
        """Разбирает узлы до завершающей директивы текущего блока или конца текста."""
        nodes: List[TemplateNode] = []

        for span in self._spans:
            if isinstance(span, LiteralSpan):
                nodes.append(TextNode(span.text))
                continue

            result = self._parse_directive(span, opener)
            if isinstance(result, _Terminator):
                return tuple(nodes), result
            nodes.append(result)

        if opener is not None:
            raise ParseError(f"Unclosed '{{#{opener.keyword}}}' block: expected '{{/}}'", opener.position)

        return tuple(nodes), None

    def _parse_directive(self, span: DirectiveSpan, opener: Optional[_OpenBlock]) -> Union[TemplateNode, _Terminator]:
        self._directive_count += 1
        parser = ExpressionParser(self._lexer.tokenize(span.content, span.content_offset))
        first = parser.current()

        if first.type == 'SYMBOL' and first.value == "#":
            parser.advance()
            return self._parse_block(span, parser)

        if first.type == 'SYMBOL' and first.value == ":":
            parser.advance()
            return self._parse_else(span, parser, opener)

        if first.type == 'OPERATOR' and first.value == "/":
            parser.advance()
            if opener is None:
                raise ParseError("Unmatched '{/}': there is no open block to close", span.position)
            parser.expect_end()
            return _Terminator("close", span.position)

        if first.type == 'SYMBOL' and first.value == "@":
            parser.advance()
            return self._parse_statement(span, parser)

        return InterpolationNode(parser.parse(), span.position)

    def _parse_block(self, span: DirectiveSpan, parser: ExpressionParser) -> TemplateNode:
        """Разбирает {#if ...} или {#for ... in ...} вместе с телом блока."""
        if parser.match_word("if"):
            if parser.is_at_end():
                raise ParseError("Expected a condition after '#if'", parser.current().position)
            condition = parser.parse()
            return self._parse_conditional(condition, span.position, span.position)

        if parser.match_word("for"):
            variable = parser.consume_identifier("Expected loop variable after '#for'")
            if not parser.match_word("in"):
                current = parser.current()
                raise ParseError(f"Expected 'in' after loop variable '{variable.value}'", current.position)
            if parser.is_at_end():
                raise ParseError("Expected an iterable after 'in'", parser.current().position)
            iterable = parser.parse()

            self._enter_block(span.position)
            try:
                body, _ = self._parse_body(_OpenBlock("for", span.position, allows_else=False))
            finally:
                self._block_depth -= 1
            return LoopNode(variable.value, iterable, body, span.position)

        current = parser.current()
        raise ParseError(f"Expected 'if' or 'for' after '#', found {describe_token(current)}", current.position)

    def _parse_conditional(self, condition: Expr, position: int, block_position: int) -> ConditionalNode:
        """
        Разбирает тело условного блока и его ветки.

        block_position: позиция исходного {#if}; ветки {:else if} закрываются
        тем же {/}, поэтому ошибка о незакрытом блоке указывает на него.
        """
        self._enter_block(position)
        try:
            then_body, terminator = self._parse_body(_OpenBlock("if", block_position, allows_else=True))

            if terminator.kind == "else":
                else_body, _ = self._parse_body(_OpenBlock("if", block_position, allows_else=False))
                return ConditionalNode(condition, then_body, else_body, position)

            if terminator.kind == "else_if":
                nested = self._parse_conditional(terminator.condition, terminator.position, block_position)
                return ConditionalNode(condition, then_body, (nested,), position)

            return ConditionalNode(condition, then_body, None, position)
        finally:
            self._block_depth -= 1

    def _enter_block(self, position: int) -> None:
        self._block_depth += 1
        if self._block_depth > MAX_BLOCK_DEPTH:
            raise ParseError(f"Blocks nested too deeply (more than {MAX_BLOCK_DEPTH} levels)", position)

    def _parse_else(self, span: DirectiveSpan, parser: ExpressionParser, opener: Optional[_OpenBlock]) -> _Terminator:
        if not parser.match_word("else"):
            current = parser.current()
            raise ParseError(f"Expected 'else' after ':', found {describe_token(current)}", current.position)

        if opener is None or opener.keyword != "if":
            raise ParseError("'{:else}' is only allowed inside an '{#if}' block", span.position)
        if not opener.allows_else:
            raise ParseError("Unexpected '{:else}': the '{#if}' block already has an else branch", span.position)

        if parser.match_word("if"):
            if parser.is_at_end():
                raise ParseError("Expected a condition after 'else if'", parser.current().position)
            return _Terminator("else_if", span.position, parser.parse())

        parser.expect_end()
        return _Terminator("else", span.position)

    def _parse_statement(self, span: DirectiveSpan, parser: ExpressionParser) -> TemplateNode:
        if not parser.match_word("keys"):
            current = parser.current()
            raise ParseError(f"Unknown statement after '@', found {describe_token(current)}", current.position)

        names: List[str] = []
        while not parser.is_at_end():
            names.append(parser.consume_identifier("Expected a key name in '@keys'").value)

        if self._directive_count != 1:
            warning = ParseWarning("'{@keys}' should be the first directive in the template", span.position)
            self.warnings.append(warning)
            logger.warning("%s", warning)

        for name in names:
            if name not in self.declared_keys:
                self.declared_keys.append(name)

        return KeysNode(tuple(names), span.position)


def parse_template(text: str) -> TemplateAST:
    """
    Удобная функция для разбора шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        AST шаблона

    Raises:
        ScanError, ParseError: При ошибке компиляции
    """
    return TemplateParser(text).parse()


__all__ = ["MAX_BLOCK_DEPTH", "ParseWarning", "TemplateParser", "parse_template"]
