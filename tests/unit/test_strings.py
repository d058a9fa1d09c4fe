import pytest

import lexer as lx
from lexer import Token, TokenKind


def test_escaped_quote_kept_in_string():
    assert lx.lex('"a\\"b"') == [Token(TokenKind.STRING, 'a"b')]


def test_escaped_backslash_kept_in_string():
    assert lx.lex('"a\\\\b"') == [Token(TokenKind.STRING, "a\\b")]


def test_unknown_escape_is_passed_through_laxly():
    # Intentionally lax: \n is not a newline escape, just an "n".
    assert lx.lex('"a\\nb"') == [Token(TokenKind.STRING, "anb")]


def test_string_may_span_lines_and_hold_brackets():
    assert lx.lex('"(one\ntwo)"') == [Token(TokenKind.STRING, "(one\ntwo)")]


def test_empty_string():
    assert lx.lex('""') == [Token(TokenKind.STRING, "")]


def test_unterminated_string_reports_offset():
    with pytest.raises(lx.UnterminatedStringError) as ei:
        lx.lex('(display "hello)')
    assert ei.value.position == 9
    assert "unterminated string" in str(ei.value)


def test_trailing_backslash_leaves_string_open():
    with pytest.raises(lx.UnterminatedStringError):
        lx.lex('"abc\\"')


def test_lex_errors_are_syntax_errors():
    with pytest.raises(SyntaxError):
        lx.lex('"')
