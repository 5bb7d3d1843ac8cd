"""
Тесты парсера шаблонов: построение AST, вложенные блоки, ошибки структуры.
"""

import pytest

from curly.errors import ParseError, ScanError
from curly.expressions.model import Variable
from curly.template.nodes import ConditionalNode, InterpolationNode, KeysNode, LoopNode, TextNode
from curly.template.parser import MAX_BLOCK_DEPTH, TemplateParser, parse_template


class TestTemplateParserStructure:

    def test_text_only(self):
        assert parse_template("plain text") == (TextNode("plain text"),)

    def test_empty_template(self):
        assert parse_template("") == ()

    def test_interpolation(self):
        ast = parse_template("Hello {name}!")
        assert ast == (
            TextNode("Hello "),
            InterpolationNode(Variable("name", 7), 6),
            TextNode("!"),
        )

    def test_if_without_else(self):
        ast = parse_template("{#if ok}yes{/}")
        assert len(ast) == 1
        node = ast[0]
        assert isinstance(node, ConditionalNode)
        assert node.condition == Variable("ok", 5)
        assert node.then_body == (TextNode("yes"),)
        assert node.else_body is None
        assert node.position == 0

    def test_if_with_else(self):
        node = parse_template("{#if ok}yes{:else}no{/}")[0]
        assert node.then_body == (TextNode("yes"),)
        assert node.else_body == (TextNode("no"),)

    def test_empty_else_branch_is_not_none(self):
        node = parse_template("{#if ok}yes{:else}{/}")[0]
        assert node.else_body == ()

    def test_else_if_chain(self):
        node = parse_template("{#if a}A{:else if b}B{:else}C{/}")[0]
        assert isinstance(node, ConditionalNode)
        assert node.then_body == (TextNode("A"),)
        assert len(node.else_body) == 1

        nested = node.else_body[0]
        assert isinstance(nested, ConditionalNode)
        assert nested.condition == Variable("b", 18)
        assert nested.then_body == (TextNode("B"),)
        assert nested.else_body == (TextNode("C"),)

    def test_for_loop(self):
        node = parse_template("{#for u in users}<{u}>{/}")[0]
        assert isinstance(node, LoopNode)
        assert node.variable == "u"
        assert node.iterable == Variable("users", 11)
        assert len(node.body) == 3
        assert node.body[1] == InterpolationNode(Variable("u", 19), 18)

    def test_nested_blocks(self):
        ast = parse_template("{#for u in users}{#if u[admin]}*{/}{u[name]}{/}")
        loop = ast[0]
        assert isinstance(loop, LoopNode)
        assert isinstance(loop.body[0], ConditionalNode)
        assert isinstance(loop.body[1], InterpolationNode)

    def test_keys_declaration(self):
        parser = TemplateParser("{@keys title users}\n{title}")
        ast = parser.parse()
        assert ast[0] == KeysNode(("title", "users"), 0)
        assert parser.declared_keys == ["title", "users"]
        assert parser.warnings == []

    def test_keys_after_text_is_still_first_directive(self):
        parser = TemplateParser("<!-- header -->\n{@keys id}")
        parser.parse()
        assert parser.warnings == []

    def test_misplaced_keys_produces_warning(self):
        parser = TemplateParser("{name}{@keys id}")
        ast = parser.parse()
        assert isinstance(ast[1], KeysNode)
        assert len(parser.warnings) == 1
        assert parser.warnings[0].position == 6
        assert "first directive" in str(parser.warnings[0])
        assert parser.declared_keys == ["id"]

    def test_duplicate_keys_declared_once(self):
        parser = TemplateParser("{@keys a b}{@keys b c}")
        parser.parse()
        assert parser.declared_keys == ["a", "b", "c"]


class TestTemplateParserErrors:

    def test_unclosed_if(self):
        with pytest.raises(ParseError) as exc:
            parse_template("{#if x}")
        assert exc.value.position == 0
        assert "Unclosed '{#if}'" in str(exc.value)

    def test_unclosed_nested_for_reports_inner_opener(self):
        with pytest.raises(ParseError) as exc:
            parse_template("{#if a}{#for x in xs}{/}")
        assert exc.value.position == 0

        with pytest.raises(ParseError) as exc:
            parse_template("{#if a}{/}{#for x in xs}..")
        assert exc.value.position == 10
        assert "Unclosed '{#for}'" in str(exc.value)

    def test_unclosed_else_if_reports_opening_if(self):
        with pytest.raises(ParseError) as exc:
            parse_template("ab{#if a}A{:else if b}B")
        assert exc.value.position == 2

    def test_unmatched_close(self):
        with pytest.raises(ParseError, match="Unmatched '\\{/\\}'"):
            parse_template("text{/}")

    def test_close_with_trailing_tokens(self):
        with pytest.raises(ParseError, match="Unexpected token 'x'"):
            parse_template("{#if a}{/ x}")

    def test_else_outside_block(self):
        with pytest.raises(ParseError, match="only allowed inside"):
            parse_template("{:else}")

    def test_else_inside_for(self):
        with pytest.raises(ParseError, match="only allowed inside"):
            parse_template("{#for x in xs}a{:else}b{/}")

    def test_second_else(self):
        with pytest.raises(ParseError, match="already has an else branch") as exc:
            parse_template("{#if a}1{:else}2{:else}3{/}")
        assert exc.value.position == 16

    def test_unknown_block_keyword(self):
        with pytest.raises(ParseError, match="Expected 'if' or 'for' after '#', found 'while'"):
            parse_template("{#while x}{/}")

    def test_for_without_in(self):
        with pytest.raises(ParseError, match="Expected 'in' after loop variable 'u'"):
            parse_template("{#for u users}{/}")

    def test_for_without_variable(self):
        with pytest.raises(ParseError, match="Expected loop variable"):
            parse_template("{#for 1 in xs}{/}")

    def test_if_without_condition(self):
        with pytest.raises(ParseError, match="Expected a condition after '#if'"):
            parse_template("{#if}{/}")

    def test_unknown_statement(self):
        with pytest.raises(ParseError, match="Unknown statement after '@', found 'base'"):
            parse_template("{@base layout}")

    def test_keys_requires_identifiers(self):
        with pytest.raises(ParseError, match="Expected a key name"):
            parse_template('{@keys a "b"}')

    def test_empty_directive(self):
        with pytest.raises(ParseError, match="Empty expression"):
            parse_template("a{}b")

    def test_expression_error_offset_is_absolute(self):
        with pytest.raises(ParseError) as exc:
            parse_template("0123{a + }")
        assert exc.value.position == 9

    def test_scan_errors_propagate(self):
        with pytest.raises(ScanError):
            parse_template("{#if a}{x{/}")


class TestTemplateNestingLimits:

    def test_blocks_at_limit(self):
        text = "{#if true}" * MAX_BLOCK_DEPTH + "x" + "{/}" * MAX_BLOCK_DEPTH
        ast = parse_template(text)
        assert isinstance(ast[0], ConditionalNode)

    def test_blocks_too_deep(self):
        text = "{#for x in xs}" * (MAX_BLOCK_DEPTH + 1) + "{/}" * (MAX_BLOCK_DEPTH + 1)
        with pytest.raises(ParseError, match="Blocks nested too deeply") as exc:
            parse_template(text)
        assert exc.value.position == 14 * MAX_BLOCK_DEPTH

    def test_long_else_if_chain(self):
        """Каждая ветка {:else if} добавляет уровень вложенности"""
        text = "{#if false}" + "{:else if false}" * (MAX_BLOCK_DEPTH + 1) + "{/}"
        with pytest.raises(ParseError, match="Blocks nested too deeply"):
            parse_template(text)
