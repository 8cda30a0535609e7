"""
structupdate.path — Path specifiers.

A path says where in a value a command applies.  Accepted forms:

    None                  the value itself
    "name" / 3            a single key or list index
    ["a", 0, "b"]         an explicit key list (used verbatim)
    'a.b[0]["c.d"]'       accessor syntax, parsed left to right

Accessor syntax grammar:

    path     := head tail*
    head     := ident | bracket
    tail     := "." ident | bracket
    bracket  := "[" ( digits | quoted ) "]"
    quoted   := '...' | "..."        (backslash escapes allowed)
    ident    := any run of characters other than "." and "["
"""

import ast
from typing import Any, Optional, Union

from .errors import PathSyntaxError

Key = Union[str, int]
PathSpec = Optional[Union[Key, list, tuple]]


def to_key_path(spec: PathSpec) -> list:
    """Normalize a path specifier into a list of keys."""
    if spec is None:
        return []
    if isinstance(spec, bool):
        raise TypeError(f"path must be a key, a list of keys or None, got {spec!r}")
    if isinstance(spec, int):
        return [spec]
    if isinstance(spec, str):
        return parse_path(spec)
    if isinstance(spec, (list, tuple)):
        return list(spec)
    raise TypeError(f"path must be a key, a list of keys or None, got {type(spec).__name__}")


def parse_path(text: str) -> list:
    """
    Parse accessor syntax into keys.

        parse_path('x.y[0]["z"]')  →  ['x', 'y', 0, 'z']

    Raises PathSyntaxError on unterminated brackets, unmatched quotes,
    empty segments and stray characters after a closing bracket.
    """
    if text == "":
        return [""]

    keys: list = []
    pos = 0
    n = len(text)
    expect_ident = text[0] != "["

    while pos < n:
        if expect_ident:
            end = pos
            while end < n and text[end] not in ".[":
                end += 1
            if end == pos:
                raise PathSyntaxError(text, pos, "empty property name")
            keys.append(text[pos:end])
            pos = end
        elif text[pos] == "[":
            key, pos = _parse_bracket(text, pos)
            keys.append(key)
        else:
            raise PathSyntaxError(text, pos, f"unexpected character {text[pos]!r}")

        expect_ident = False
        if pos < n and text[pos] == ".":
            pos += 1
            if pos == n:
                raise PathSyntaxError(text, pos, "path ends with '.'")
            expect_ident = True
        elif pos < n and text[pos] != "[":
            raise PathSyntaxError(text, pos, f"unexpected character {text[pos]!r}")

    return keys


def _parse_bracket(text: str, start: int) -> tuple[Key, int]:
    """Parse ``[...]`` at ``start``; return the key and the position after ``]``."""
    pos = start + 1
    n = len(text)

    if pos < n and text[pos] in "'\"":
        quote = text[pos]
        end = pos + 1
        while end < n and text[end] != quote:
            end += 2 if text[end] == "\\" else 1
        if end >= n:
            raise PathSyntaxError(text, pos, "unterminated string literal")
        literal = text[pos:end + 1]
        try:
            key = ast.literal_eval(literal)
        except (SyntaxError, ValueError) as exc:
            raise PathSyntaxError(text, pos, f"invalid string literal {literal}") from exc
        pos = end + 1
    else:
        end = pos
        while end < n and text[end] in "0123456789":
            end += 1
        if end == pos:
            raise PathSyntaxError(text, pos, "expected an index or a quoted key")
        key = int(text[pos:end])
        pos = end

    if pos >= n or text[pos] != "]":
        raise PathSyntaxError(text, pos, "expected ']'")
    return key, pos + 1


def build_path_object(spec: PathSpec, leaf: Any) -> Any:
    """
    Wrap ``leaf`` in nested mappings following ``spec``.

        build_path_object("a.b", {"$set": 1})  →  {"a": {"b": {"$set": 1}}}

    An empty path returns ``leaf`` itself.
    """
    node = leaf
    for key in reversed(to_key_path(spec)):
        node = {key: node}
    return node
