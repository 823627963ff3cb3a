"""Thin adapter over tinycss2: parsing, node predicates and serialization."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import tinycss2
from tinycss2.ast import (
    Declaration,
    FunctionBlock,
    IdentToken,
    LiteralToken,
    Node,
    ParseError,
    WhitespaceToken,
)

_INSIGNIFICANT_TYPES = frozenset({"whitespace", "comment"})
_STRAY_LITERALS = frozenset({";", ")", "]", "}"})


class CssParseError(ValueError):
    """Raised when a declaration value is not valid CSS."""

    def __init__(self, property_name: str, value: str, reason: str) -> None:
        super().__init__(f"cannot parse value for {property_name!r}: {reason} ({value!r})")
        self.property = property_name
        self.value = value
        self.reason = reason


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_stylesheet(css_text: str) -> list[Node]:
    """Parse stylesheet text into top-level rules (comments/whitespace dropped)."""
    return tinycss2.parse_stylesheet(css_text, skip_comments=True, skip_whitespace=True)


def parse_block_contents(content: Sequence[Node] | None) -> list[Node]:
    """Parse a `{}` block body into declarations, nested rules and at-rules."""
    if not content:
        return []
    return tinycss2.parse_blocks_contents(content, skip_comments=True, skip_whitespace=True)


def parse_rule_list(content: Sequence[Node] | None) -> list[Node]:
    """Parse the body of a grouping at-rule (`@media`, `@supports`, ...)."""
    if not content:
        return []
    return tinycss2.parse_rule_list(content, skip_comments=True, skip_whitespace=True)


def _find_parse_error(nodes: Iterable[Any]) -> ParseError | None:
    for node in nodes:
        if isinstance(node, ParseError):
            return node
        children = getattr(node, "arguments", None)
        if children is None:
            children = getattr(node, "content", None)
        if children:
            found = _find_parse_error(children)
            if found is not None:
                return found
    return None


def parse_declaration_value(property_name: str, value: str) -> list[Node]:
    """Parse one `property: value` pair and return the value node list.

    Raises:
        CssParseError: the text is not a single valid declaration value.
    """
    parsed = tinycss2.parse_one_declaration(f"{property_name}: {value}", skip_comments=True)
    if isinstance(parsed, ParseError):
        raise CssParseError(property_name, value, parsed.message)
    assert isinstance(parsed, Declaration)
    if parsed.important:
        raise CssParseError(property_name, value, "unexpected '!important'")
    nodes = list(parsed.value)
    if not significant_nodes(nodes):
        raise CssParseError(property_name, value, "empty value")
    error = _find_parse_error(nodes)
    if error is not None:
        raise CssParseError(property_name, value, error.message)
    for node in nodes:
        if isinstance(node, LiteralToken) and node.value in _STRAY_LITERALS:
            raise CssParseError(property_name, value, f"unexpected {node.value!r}")
    return nodes


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------

def significant_nodes(nodes: Iterable[Node]) -> list[Node]:
    return [node for node in nodes if node.type not in _INSIGNIFICANT_TYPES]


def first_significant(nodes: Iterable[Node] | None) -> Node | None:
    for node in nodes or ():
        if node.type not in _INSIGNIFICANT_TYPES:
            return node
    return None


def is_anchor_function(node: Node | None) -> bool:
    return isinstance(node, FunctionBlock) and node.lower_name == "anchor"


def is_ident(node: Node | None) -> bool:
    return isinstance(node, IdentToken)


def is_comma(node: Node | None) -> bool:
    return isinstance(node, LiteralToken) and node.value == ","


def replace_ident(node: IdentToken, value: str) -> IdentToken:
    return IdentToken(node.source_line, node.source_column, value)


def replace_function_arguments(node: FunctionBlock, arguments: list[Node]) -> FunctionBlock:
    return FunctionBlock(node.source_line, node.source_column, node.name, arguments)


def join_components(components: Sequence[Node]) -> list[Node]:
    """Rebuild a space-separated value from its significant components."""
    joined: list[Node] = []
    for idx, component in enumerate(components):
        if idx:
            joined.append(WhitespaceToken(component.source_line, component.source_column, " "))
        joined.append(component)
    return joined


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def generate_css(nodes: Iterable[Node]) -> str:
    """Serialize nodes back to CSS text, trimmed of outer whitespace."""
    return tinycss2.serialize(nodes).strip()
