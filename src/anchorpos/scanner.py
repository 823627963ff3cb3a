"""Single-pass stylesheet scanner collecting raw anchor-positioning data."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from tinycss2.ast import AtRule, Declaration, FunctionBlock, Node, QualifiedRule

from anchorpos.css_grammar import (
    first_significant,
    generate_css,
    is_anchor_function,
    is_comma,
    is_ident,
    parse_block_contents,
    parse_rule_list,
    parse_stylesheet,
)
from anchorpos.types import AnchorFunctionRef, RawAnchorData, TryBlock

log = logging.getLogger(__name__)

ANCHOR_NAME_PROPERTY = "anchor-name"
FALLBACK_PROPERTY = "position-fallback"
FALLBACK_AT_RULE = "position-fallback"
TRY_AT_RULE = "try"


def parse_anchor_function(node: FunctionBlock) -> AnchorFunctionRef | None:
    """Parse the arguments of an `anchor()` call.

    Before the first comma, argument 0 is the anchor name and argument 1 the
    anchor edge, each only when it is an identifier. Everything after the
    comma is kept verbatim as the fallback value. Returns `None` when either
    the name or the edge is missing.
    """

    anchor_name: str | None = None
    anchor_edge: str | None = None
    fallback_value: str | None = None

    arguments = list(node.arguments)
    idx = 0
    for position, child in enumerate(arguments):
        if child.type in ("whitespace", "comment"):
            continue
        if is_comma(child):
            fallback_value = generate_css(arguments[position + 1:]) or None
            break
        if is_ident(child):
            if idx == 0:
                anchor_name = child.value
            elif idx == 1:
                anchor_edge = child.value
        idx += 1

    if not anchor_name or not anchor_edge:
        return None
    return AnchorFunctionRef(
        anchor_name=anchor_name,
        anchor_edge=anchor_edge,
        fallback_value=fallback_value,
    )


def _selector_text(rule: QualifiedRule) -> str:
    return generate_css(rule.prelude)


def _first_ident_value(declaration: Declaration) -> str | None:
    first = first_significant(declaration.value)
    if is_ident(first):
        return first.value
    return None


def _scan_try_block(at_rule: AtRule) -> TryBlock:
    try_block: TryBlock = {}
    for child in parse_block_contents(at_rule.content):
        if not isinstance(child, Declaration):
            continue
        first = first_significant(child.value)
        if is_anchor_function(first):
            ref = parse_anchor_function(first)
            if ref is None:
                log.debug("dropping unparseable anchor() in @try: %s", child.name)
                continue
            try_block[child.name] = ref
        else:
            try_block[child.name] = generate_css(child.value)
    return try_block


@dataclass(frozen=True, slots=True)
class _AnchorNameFound:
    anchor_name: str
    selector: str


@dataclass(frozen=True, slots=True)
class _AnchorFunctionFound:
    selector: str
    prop: str
    ref: AnchorFunctionRef


@dataclass(frozen=True, slots=True)
class _FallbackNameFound:
    selector: str
    fallback_name: str


@dataclass(frozen=True, slots=True)
class _FallbackSetFound:
    fallback_name: str
    try_blocks: tuple[TryBlock, ...]


type _Finding = _AnchorNameFound | _AnchorFunctionFound | _FallbackNameFound | _FallbackSetFound


def _declaration_findings(declaration: Declaration, selector: str | None) -> Iterator[_Finding]:
    if selector is None:
        log.debug("skipping bare declaration %s", declaration.name)
        return
    name = declaration.lower_name
    if name == ANCHOR_NAME_PROPERTY:
        anchor_name = _first_ident_value(declaration)
        if anchor_name is not None:
            yield _AnchorNameFound(anchor_name, selector)
        return
    if name == FALLBACK_PROPERTY:
        fallback_name = _first_ident_value(declaration)
        if fallback_name is not None:
            yield _FallbackNameFound(selector, fallback_name)
        return
    first = first_significant(declaration.value)
    if is_anchor_function(first):
        ref = parse_anchor_function(first)
        if ref is None:
            log.debug("dropping unparseable anchor() on %s { %s }", selector, declaration.name)
            return
        yield _AnchorFunctionFound(selector, declaration.name, ref)


def _fallback_rule_findings(at_rule: AtRule) -> Iterator[_Finding]:
    name = generate_css(at_rule.prelude)
    if not name or at_rule.content is None:
        log.debug("skipping @%s without name or block", at_rule.at_keyword)
        return
    try_blocks = tuple(
        _scan_try_block(child)
        for child in parse_block_contents(at_rule.content)
        if isinstance(child, AtRule) and child.lower_at_keyword == TRY_AT_RULE and child.content is not None
    )
    yield _FallbackSetFound(name, try_blocks)


def _iter_findings(nodes: Sequence[Node], selector: str | None) -> Iterator[_Finding]:
    for node in nodes:
        if isinstance(node, Declaration):
            yield from _declaration_findings(node, selector)
        elif isinstance(node, QualifiedRule):
            yield from _iter_findings(parse_block_contents(node.content), _selector_text(node))
        elif isinstance(node, AtRule):
            if node.lower_at_keyword == FALLBACK_AT_RULE:
                yield from _fallback_rule_findings(node)
            elif node.content is None:
                continue
            elif selector is None:
                yield from _iter_findings(parse_rule_list(node.content), None)
            else:
                # Conditional group rule nested inside a style rule.
                yield from _iter_findings(parse_block_contents(node.content), selector)
        else:
            log.debug("skipping %s node", node.type)


def scan_stylesheet(payload: str | Sequence[Node]) -> RawAnchorData:
    """Scan a stylesheet once and return the four raw maps.

    `payload` is stylesheet text or the top-level nodes already returned by
    `parse_stylesheet`. Unrelated or malformed nodes are skipped.
    """

    nodes = parse_stylesheet(payload) if isinstance(payload, str) else payload
    data = RawAnchorData()
    for finding in _iter_findings(nodes, None):
        match finding:
            case _AnchorNameFound(anchor_name, selector):
                data.anchor_names.setdefault(anchor_name, []).append(selector)
            case _AnchorFunctionFound(selector, prop, ref):
                data.anchor_functions.setdefault(selector, {})[prop] = ref
            case _FallbackNameFound(selector, fallback_name):
                data.fallback_names[selector] = fallback_name
            case _FallbackSetFound(fallback_name, try_blocks):
                data.fallbacks[fallback_name] = list(try_blocks)

    log.debug(
        "scanned stylesheet: %d anchor names, %d floating selectors, %d fallback sets",
        len(data.anchor_names),
        len(data.anchor_functions),
        len(data.fallbacks),
    )
    return data
