"""A small s-expression reader, printer and pretty-printer.

An s-expression is either an atom (``str``) or a list of s-expressions
(``list``).  Empty input and ``()`` both read as the empty list.
"""

from __future__ import annotations

from typing import Iterator, Union

Sexp = Union[str, list]

_DELIMITERS = frozenset('()";')


class SexpError(ValueError):
    """Raised when text is not a well-formed s-expression."""


def _tokenize(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``("open"|"close"|"atom", value)`` tokens."""
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        if char.isspace():
            pos += 1
        elif char == ";":
            newline = text.find("\n", pos)
            pos = length if newline < 0 else newline + 1
        elif char == "(":
            yield "open", char
            pos += 1
        elif char == ")":
            yield "close", char
            pos += 1
        elif char == '"':
            pos += 1
            chars = []
            while True:
                if pos >= length:
                    raise SexpError("unterminated string literal")
                char = text[pos]
                if char == "\\":
                    if pos + 1 >= length:
                        raise SexpError("unterminated string literal")
                    chars.append(text[pos + 1])
                    pos += 2
                elif char == '"':
                    pos += 1
                    break
                else:
                    chars.append(char)
                    pos += 1
            yield "atom", "".join(chars)
        else:
            start = pos
            while pos < length and not text[pos].isspace() and text[pos] not in _DELIMITERS:
                pos += 1
            yield "atom", text[start:pos]


def parse_sexp(text: str) -> Sexp:
    """Read exactly one s-expression from ``text``."""
    stack: list[list] = [[]]
    for kind, value in _tokenize(text):
        if kind == "open":
            stack.append([])
        elif kind == "close":
            if len(stack) == 1:
                raise SexpError("unexpected ')'")
            finished = stack.pop()
            stack[-1].append(finished)
        else:
            stack[-1].append(value)
    if len(stack) > 1:
        raise SexpError("unclosed '('")
    top = stack[0]
    if not top:
        return []
    if len(top) > 1:
        raise SexpError("expected a single expression, found trailing input")
    return top[0]


def _atom_to_string(atom: str) -> str:
    if atom and not any(c.isspace() or c in _DELIMITERS or c == "\\" for c in atom):
        return atom
    escaped = atom.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def sexp_to_string(sexp: Sexp) -> str:
    """Render an s-expression on one line."""
    if isinstance(sexp, str):
        return _atom_to_string(sexp)
    return "(" + " ".join(sexp_to_string(item) for item in sexp) + ")"


def pretty_print(sexp: Sexp, width: int, indent: int) -> str:
    """Render an s-expression, breaking lists longer than ``width``.

    A list too wide for one line puts each element after the head on its
    own line, indented by two spaces per ``indent`` level.
    """
    parts: list[str] = []
    _pretty(parts, sexp, width, indent)
    return "".join(parts)


def _pretty(parts: list[str], sexp: Sexp, width: int, level: int) -> None:
    if isinstance(sexp, str):
        parts.append(sexp_to_string(sexp).strip('"'))
        return
    broken = len(sexp_to_string(sexp)) > width
    parts.append("(")
    for position, item in enumerate(sexp):
        if position > 0:
            parts.append("\n" + "  " * level if broken else " ")
        _pretty(parts, item, width, level + 1)
    parts.append(")")