"""Typed selector descriptors.

Graph documents store selectors as strings: raw CSS/XPath, or a small
``get_by_role('button', name='Next')`` style query, optionally followed by
``.nth(i)`` and optionally combined as ``A.or_(B)``, which may
take its own ``.nth(i)``. They are parsed once
into the dataclasses below; drivers only ever see the typed values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

PLACEHOLDER = "{}"

_GET_BY = re.compile(
    r"^get_by_(?P<method>\w+)\((?P<args>.*?)\)(?:\.nth\((?P<nth>-?\d+)\))?$",
    re.DOTALL,
)
_ARG = re.compile(
    r"""\s*(?:(?P<key>\w+)\s*=\s*)?(?P<value>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|[^,]+?)\s*(?:,|$)"""
)
_NTH_SUFFIX = re.compile(r"(?:\.nth\((?P<nth>-?\d+)\))?")


@dataclass(frozen=True)
class CssSelector:
    """Raw CSS or XPath query passed straight to the driver."""

    query: str
    nth: int | None = None


@dataclass(frozen=True)
class RoleSelector:
    role: str
    name: str | None = None
    exact: bool | None = None
    nth: int | None = None


@dataclass(frozen=True)
class TextSelector:
    text: str
    exact: bool | None = None
    nth: int | None = None


@dataclass(frozen=True)
class LabelSelector:
    label: str
    exact: bool | None = None
    nth: int | None = None


@dataclass(frozen=True)
class EitherSelector:
    """Whichever of two alternatives is visible; the second wins a tie.

    ``nth`` applies to the chosen alternative.
    """

    first: "Selector"
    second: "Selector"
    nth: int | None = None


Selector = Union[CssSelector, RoleSelector, TextSelector, LabelSelector, EitherSelector]


def substitute(template: str, value: Any) -> str:
    """Replace the first ``{}`` placeholder with ``value`` when one is given."""
    if value is None or PLACEHOLDER not in template:
        return template
    return template.replace(PLACEHOLDER, str(value), 1)


def parse_selector(template: str, value: Any = None) -> Selector:
    text = substitute(template, value).strip()
    if not text.startswith("get_by_"):
        return CssSelector(text)

    split_at = text.find("or_(")
    if split_at > 0:
        opened = split_at + len("or_(")
        closed = _closing_paren(text, opened - 1)
        if closed is not None:
            tail = _NTH_SUFFIX.fullmatch(text[closed + 1:].strip())
            if tail is not None:
                return EitherSelector(
                    _parse_query(text[:split_at].rstrip(".")),
                    _parse_query(text[opened:closed].strip()),
                    nth=int(tail.group("nth")) if tail.group("nth") is not None else None,
                )
    return _parse_query(text)


def describe(selector: Selector) -> str:
    """Readable form used in logs and error messages."""
    if isinstance(selector, EitherSelector):
        base = f"{describe(selector.first)} | {describe(selector.second)}"
        if selector.nth is not None:
            base = f"({base}) >> nth={selector.nth}"
        return base
    if isinstance(selector, CssSelector):
        base = selector.query
    elif isinstance(selector, RoleSelector):
        base = f"role={selector.role}" + (f"[name={selector.name!r}]" if selector.name else "")
    elif isinstance(selector, TextSelector):
        base = f"text={selector.text!r}"
    else:
        base = f"label={selector.label!r}"
    if selector.nth is not None:
        base += f" >> nth={selector.nth}"
    return base


def _parse_query(text: str) -> Selector:
    match = _GET_BY.match(text.strip())
    if not match:
        return CssSelector(text)

    method = match.group("method")
    positional, keywords = _parse_args(match.group("args"))
    nth = int(match.group("nth")) if match.group("nth") is not None else None
    if not positional:
        return CssSelector(text)

    exact = keywords.get("exact")
    if method == "role":
        name = keywords.get("name")
        return RoleSelector(
            role=str(positional[0]),
            name=None if name is None else str(name),
            exact=exact,
            nth=nth,
        )
    if method == "text":
        return TextSelector(text=str(positional[0]), exact=exact, nth=nth)
    if method == "label":
        return LabelSelector(label=str(positional[0]), exact=exact, nth=nth)
    return CssSelector(text)


def _closing_paren(text: str, opened: int) -> int | None:
    """Index of the paren closing the one at ``opened``; quoted text is skipped."""
    depth = 0
    quote: str | None = None
    for index in range(opened, len(text)):
        char = text[index]
        if quote:
            if char == quote and text[index - 1] != "\\":
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def _parse_args(raw: str) -> tuple[list[Any], dict[str, Any]]:
    positional: list[Any] = []
    keywords: dict[str, Any] = {}
    for match in _ARG.finditer(raw):
        token = match.group("value")
        if token is None or not token.strip():
            continue
        value = _literal(token.strip())
        if match.group("key"):
            keywords[match.group("key")] = value
        else:
            positional.append(value)
    return positional, keywords


def _literal(token: str) -> Any:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "'\"":
        return token[1:-1]
    lowered = token.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return token


__all__ = [
    "PLACEHOLDER",
    "CssSelector",
    "RoleSelector",
    "TextSelector",
    "LabelSelector",
    "EitherSelector",
    "Selector",
    "substitute",
    "parse_selector",
    "describe",
]
