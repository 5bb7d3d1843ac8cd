"""
End-to-end tests for the public template API.
"""

import pytest

import curly
from curly import MissingKeyError, ParseError, ScanError, Scope, Template, compile_template, render_template
from curly.template.parser import MAX_BLOCK_DEPTH
from curly.values import Value


def test_hello_world():
    assert render_template("Hello {name}!", {"name": "World"}) == "Hello World!"


def test_text_without_directives_is_unchanged():
    text = "Line one\nLine two } with a stray brace\n"
    assert render_template(text, {}) == text


def test_parity_condition():
    template = compile_template("{#if count % 2 = 1} odd {:else} even {/}")
    assert template.render({"count": 4}) == " even "
    assert template.render({"count": 5}) == " odd "


def test_missing_declared_key():
    with pytest.raises(MissingKeyError) as exc:
        render_template("{@keys id}\nUser {id}", {})
    assert exc.value.keys == ["id"]


def test_loop_over_users(users_env):
    assert render_template("{#for u in users}{u[name]}{/}", users_env) == "AnnBob"


def test_unclosed_if_is_parse_error():
    with pytest.raises(ParseError) as exc:
        compile_template("{#if x}")
    assert exc.value.position == 0


def test_unbalanced_brace_is_scan_error():
    with pytest.raises(ScanError):
        compile_template("Hello {name")


def test_empty_loop_renders_empty_string():
    assert render_template("{#for x in xs}...{/}", {"xs": []}) == ""


def test_compiled_template_is_reusable(users_env):
    template = compile_template("{title} ({count}): {#for u in users}{u[name]}{#if u[age] > 30}*{/} {/}")
    first = template.render(users_env)
    assert first == "Team (4): Ann* Bob "
    assert template.render(users_env) == first
    assert template.render(dict(users_env, title="Crew")).startswith("Crew (4)")


def test_compile_collects_keys_and_warnings():
    template = compile_template("{a}{@keys a b}")
    assert isinstance(template, Template)
    assert template.declared_keys == ("a", "b")
    assert len(template.warnings) == 1


def test_render_accepts_scope():
    scope = Scope({"greeting": Value.string("Hi")})
    assert compile_template("{greeting}, {greeting}").render(scope) == "Hi, Hi"


def test_render_rejects_unsupported_python_values():
    with pytest.raises(TypeError):
        render_template("{x}", {"x": object()})


def test_package_exports():
    assert curly.render_template is render_template
    assert issubclass(curly.ParseError, curly.CurlyUserError)
    assert issubclass(curly.MissingKeyError, curly.TemplateRenderError)


def test_small_fraction_renders_in_decimal_form():
    assert render_template("{1 / 100000}", {}) == "0.00001"
    assert render_template("{x * 3}", {"x": 0.5}) == "1.5"


def test_len_builtin(users_env):
    template = "{len(users)} users: {#for u in users}{u[name]}{#if len(u[name]) > 2}!{/} {/}"
    assert render_template(template, users_env) == "2 users: Ann! Bob! "


def test_deepest_allowed_nesting_renders():
    text = "{#if true}" * MAX_BLOCK_DEPTH + "x" + "{/}" * MAX_BLOCK_DEPTH
    assert render_template(text, {}) == "x"
