# scheme_reader.py
# S-expression reader for a Scheme-like notation: parser, printer and CLI.
#
# =============================================================================
#  PARSER IMPLEMENTATION: STACK-DRIVEN DESCENT OVER THE TOKEN STREAM
# =============================================================================
#
# The grammar is tiny: a form is an atom or a parenthesized sequence of forms.
# One token of lookahead is enough. Open lists are kept on an explicit stack
# instead of the Python call stack, so nesting depth is limited only by memory.
#
# Tokens come from lexer.py; this module only looks at their kind, value and
# offset.
# =============================================================================

import argparse
import logging
import math
import os
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from lexer import LexError, Token, TokenKind, lex

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
PROMPT = "scheme> "

_ATOM_KINDS = {TokenKind.NUMBER, TokenKind.SYMBOL, TokenKind.STRING}


# ---------------------------------------------------------------------------
# EXPRESSION TREE
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Symbol:
    name: str


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class ListExpr:
    """A parenthesized form. ``items`` holds the children in source order."""
    items: Tuple["Expr", ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]


Expr = Union[Number, Symbol, String, ListExpr]


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------
class ParseError(SyntaxError):
    """Raised when a token stream does not form well-nested expressions."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} at offset {position}"
        super().__init__(message)
        self.position = position


class UnmatchedCloseError(ParseError):
    def __init__(self, position: int):
        super().__init__("unexpected ')' with no open list", position)


class UnmatchedOpenError(ParseError):
    def __init__(self, position: int):
        super().__init__("unexpected end of input - '(' opened", position)


# ---------------------------------------------------------------------------
# LOOKAHEAD RING
# ---------------------------------------------------------------------------
class LookAhead:
    """One-slot pushback iterator over tokens."""

    def __init__(self, iterable: Iterable[Token]):
        self._iter = iter(iterable)
        self._buf: List[Token] = []

    def __iter__(self):
        return self

    def __next__(self) -> Token:
        if self._buf:
            return self._buf.pop()
        return next(self._iter)

    def peek(self) -> Optional[Token]:
        """Return the next token without consuming it, or None at the end."""
        if not self._buf:
            try:
                self._buf.append(next(self._iter))
            except StopIteration:
                return None
        return self._buf[-1]


# ---------------------------------------------------------------------------
# CORE FORM PARSER
# ---------------------------------------------------------------------------
def _atom(token: Token) -> Expr:
    if token.kind is TokenKind.NUMBER:
        return Number(token.value)
    if token.kind is TokenKind.STRING:
        return String(token.value)
    return Symbol(token.value)


def _parse_form(tokens: LookAhead) -> Expr:
    """
    Parse one form starting at the next token.

    Open lists live on an explicit stack of (opener, items) pairs, so nesting
    depth is bounded by memory only. Callers guarantee a token is available.
    """
    stack: List[Tuple[Token, List[Expr]]] = []
    while True:
        token = next(tokens, None)
        if token is None:
            # Report the innermost bracket the user has to close.
            raise UnmatchedOpenError(stack[-1][0].offset)
        if token.kind is TokenKind.LPAREN:
            stack.append((token, []))
            continue
        if token.kind is TokenKind.RPAREN:
            if not stack:
                raise UnmatchedCloseError(token.offset)
            _, items = stack.pop()
            expr = ListExpr(tuple(items))
        else:
            expr = _atom(token)
        if not stack:
            return expr
        stack[-1][1].append(expr)


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def iter_forms(tokens: Iterable[Token]) -> Iterator[Expr]:
    """Yield top-level forms one at a time as they complete."""
    stream = LookAhead(tokens)
    while stream.peek() is not None:
        yield _parse_form(stream)


def parse(tokens: Iterable[Token]) -> List[Expr]:
    """
    Parse a token sequence into its top-level forms.

    A program is a sequence of forms, so the result is a list (empty for
    empty input). The first structural error aborts the whole parse.
    """
    forms = list(iter_forms(tokens))
    logging.debug("parsed %d top-level form(s)", len(forms))
    return forms


def parse_expr(tokens: Iterable[Token]) -> Expr:
    """Parse exactly one form. Empty input and trailing forms are errors."""
    stream = LookAhead(tokens)
    if stream.peek() is None:
        raise ParseError("expected an expression - got end of input")
    result = _parse_form(stream)
    extra = stream.peek()
    if extra is not None:
        raise ParseError("extra data after expression", extra.offset)
    return result


def read(text: str, *, strict_numbers: bool = False) -> List[Expr]:
    """Lex and parse source text in one step."""
    return parse(lex(text, strict_numbers=strict_numbers))


# ---------------------------------------------------------------------------
# PRINTER
# ---------------------------------------------------------------------------
def _format_number(value: float) -> str:
    if value.is_integer():
        text = str(int(value))
        if text == "0" and math.copysign(1.0, value) < 0:
            return "-0"
        return text
    return repr(value)


def _format_atom(expr: Expr) -> str:
    if isinstance(expr, Number):
        return _format_number(expr.value)
    if isinstance(expr, String):
        escaped = expr.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(expr, Symbol):
        return expr.name
    raise TypeError(f"not an expression: {expr!r}")


def to_source(expr: Expr) -> str:
    """
    Render an expression back to canonical source text.

    Works from an explicit stack like the parser, so any tree the parser
    builds can be printed. Plain strings on the stack are literal output.
    """
    if isinstance(expr, str):
        raise TypeError(f"not an expression: {expr!r}")
    parts: List[str] = []
    stack: List[Union[Expr, str]] = [expr]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, ListExpr):
            stack.append(")")
            for i, child in enumerate(reversed(item.items)):
                if i:
                    stack.append(" ")
                stack.append(child)
            stack.append("(")
        else:
            parts.append(_format_atom(item))
    return "".join(parts)


# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _get_log_level() -> int:
    """Log level from the LOGLEVEL environment variable, WARNING if unset."""
    loglevel_env = os.getenv("LOGLEVEL", "").upper()
    if loglevel_env:
        level = getattr(logging, loglevel_env, None)
        if isinstance(level, int):
            return level
    return logging.WARNING


def _emit(text: str, args) -> None:
    tokens = lex(text, strict_numbers=args.strict_numbers)
    if args.tokens:
        for tok in tokens:
            print(tok)
        return
    for form in parse(tokens):
        print(to_source(form))


def _repl(args) -> int:
    """Read one line at a time; report errors and keep going until EOF."""
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return 0
        try:
            _emit(line, args)
        except (LexError, ParseError) as exc:
            print(f"{type(exc).__name__}: {exc}", file=sys.stderr)


def _cli(argv: List[str]) -> int:
    """
    Command-line front end.

    With a file argument: 0 on success, 1 on the first reader error.
    Without one: interactive session on stdin.
    """
    logging.basicConfig(level=_get_log_level(), format="%(message)s", stream=sys.stderr)

    ap = argparse.ArgumentParser(description="Scheme S-expression reader")
    ap.add_argument("file", nargs="?", help="source file to read (interactive when omitted)")
    ap.add_argument("--tokens", action="store_true", help="print the token stream instead of forms")
    ap.add_argument("--strict-numbers", action="store_true",
                    help="reject malformed numbers that start with a digit")
    args = ap.parse_args(argv)

    if args.file is None:
        return _repl(args)

    with open(args.file, "r", encoding="utf-8") as fh:
        data = fh.read()
    logging.info("reading %s (%d characters)", args.file, len(data))

    try:
        _emit(data, args)
        return 0
    except (LexError, ParseError) as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(_cli(sys.argv[1:]))


# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
