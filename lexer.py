"""
lexer.py - Tokenizer for the Scheme reader.

Turns source text into a flat list of tokens: numbers, symbols, strings and
the two bracket markers. Whitespace separates tokens and is dropped.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Union

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
# Alternatives are tried left to right, so the group order below is the
# token precedence: string, number, bracket, whitespace, symbol.
_STRING     = r'"(?:[^"\\]|\\.)*"'
_NUMBER     = r"[\d.e-]+"
_WHITESPACE = r"\s+"
_SYMBOL     = r"[^\s()]+"

_TOKEN_RE = re.compile(
    rf"(?P<STRING>{_STRING})|"
    rf"(?P<NUMBER>{_NUMBER})|"
    r"(?P<LPAREN>\()|"
    r"(?P<RPAREN>\))|"
    rf"(?P<WHITESPACE>{_WHITESPACE})|"
    rf"(?P<SYMBOL>{_SYMBOL})",
    re.DOTALL,
)
_SYMBOL_RE = re.compile(_SYMBOL)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------
class LexError(SyntaxError):
    """Raised when source text cannot be split into tokens."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at offset {position}")
        self.position = position


class UnterminatedStringError(LexError):
    def __init__(self, position: int):
        super().__init__("unterminated string starting", position)


class InvalidNumberError(LexError):
    def __init__(self, text: str, position: int):
        super().__init__(f"invalid number literal {text!r}", position)
        self.text = text


# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class TokenKind(Enum):
    NUMBER = "NUMBER"
    SYMBOL = "SYMBOL"
    STRING = "STRING"
    LPAREN = "("
    RPAREN = ")"


@dataclass(frozen=True)
class Token:
    """
    Immutable token record.

    ``value`` is a float for NUMBER, the identifier for SYMBOL, the unescaped
    contents for STRING and the bracket character for LPAREN/RPAREN.
    ``offset`` is kept for error reporting only and does not take part in
    equality.
    """
    kind: TokenKind
    value: Union[float, str]
    offset: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        if self.kind in (TokenKind.LPAREN, TokenKind.RPAREN):
            return f"Token({self.kind.name}, pos={self.offset})"
        return f"Token({self.kind.name}, {self.value!r}, pos={self.offset})"


# ---------------------------------------------------------------------------
# SCANNER
# ---------------------------------------------------------------------------
def _unescape(raw: str) -> str:
    # Backslash keeps the next character verbatim. Only \" and \\ matter;
    # \n becomes a plain "n".
    return _ESCAPE_RE.sub(r"\1", raw[1:-1])


def _starts_strict_number(run: str) -> bool:
    return run[0].isdigit()


def iter_tokens(text: str, *, strict_numbers: bool = False) -> Iterator[Token]:
    """
    Single-pass generator producing tokens.

    A numeric-looking run that float() rejects is re-read as a symbol from
    the same position, so ``-``, ``e`` and ``else`` are identifiers. With
    ``strict_numbers`` a failed run that starts with a digit raises
    InvalidNumberError instead.
    """
    pos = 0
    end = len(text)
    while pos < end:
        m = _TOKEN_RE.match(text, pos)
        kind = m.lastgroup
        value = m.group()

        if kind != "STRING" and text.startswith('"', pos):
            raise UnterminatedStringError(pos)

        if kind == "WHITESPACE":
            pos = m.end()
            continue
        if kind == "STRING":
            yield Token(TokenKind.STRING, _unescape(value), pos)
        elif kind == "NUMBER":
            try:
                number = float(value)
            except ValueError:
                if strict_numbers and _starts_strict_number(value):
                    raise InvalidNumberError(value, pos) from None
                m = _SYMBOL_RE.match(text, pos)
                yield Token(TokenKind.SYMBOL, m.group(), pos)
            else:
                yield Token(TokenKind.NUMBER, number, pos)
        elif kind == "LPAREN":
            yield Token(TokenKind.LPAREN, value, pos)
        elif kind == "RPAREN":
            yield Token(TokenKind.RPAREN, value, pos)
        else:
            yield Token(TokenKind.SYMBOL, value, pos)
        pos = m.end()


def lex(text: str, *, strict_numbers: bool = False) -> List[Token]:
    """Tokenize ``text`` completely. Either every token or the first error."""
    tokens = list(iter_tokens(text, strict_numbers=strict_numbers))
    logging.debug("lexed %d token(s) from %d character(s)", len(tokens), len(text))
    return tokens


__all__ = [
    "InvalidNumberError",
    "LexError",
    "Token",
    "TokenKind",
    "UnterminatedStringError",
    "iter_tokens",
    "lex",
]
