"""Try-tactic transforms for a set of active positioning declarations.

A try-tactic mirrors a declaration set across the block axis (`flip-block`),
the inline axis (`flip-inline`) or not at all (`flip-start`). Properties are
renamed, `anchor()` side keywords and `inset-area` keyword chunks are flipped,
and margin shorthands are reordered. A renamed property leaves a `revert`
behind unless the set already assigns it explicitly.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

from tinycss2.ast import Node

from anchorpos.css_grammar import (
    first_significant,
    generate_css,
    is_anchor_function,
    is_ident,
    join_components,
    parse_declaration_value,
    replace_function_arguments,
    replace_ident,
    significant_nodes,
)
from anchorpos.types import (
    ACCEPTED_POSITION_TRY_PROPERTIES,
    ANCHOR_SIDES,
    REVERT,
    TRY_TACTICS,
    InsetRules,
    TryTactic,
    is_inset_area_prop,
)


type PropertyReader = Callable[[str], str | None]

INSTANCE_UUID = uuid.uuid4().hex[:21]

INSET_AREA_PROPERTY = "inset-area"


# ---------------------------------------------------------------------------
# Mapping tables
# ---------------------------------------------------------------------------

TRY_TACTICS_MAPPING: dict[TryTactic, dict[str, str]] = {
    "flip-block": {
        "top": "bottom",
        "bottom": "top",
        "inset-block-start": "inset-block-end",
        "inset-block-end": "inset-block-start",
        "margin-top": "margin-bottom",
        "margin-bottom": "margin-top",
    },
    "flip-inline": {
        "left": "right",
        "right": "left",
        "inset-inline-start": "inset-inline-end",
        "inset-inline-end": "inset-inline-start",
        "margin-left": "margin-right",
        "margin-right": "margin-left",
    },
    "flip-start": {},
}

ANCHOR_SIDE_MAPPING: dict[TryTactic, dict[str, str]] = {
    "flip-block": {
        "top": "bottom",
        "bottom": "top",
        "start": "end",
        "end": "start",
        "self-end": "self-start",
        "self-start": "self-end",
    },
    "flip-inline": {
        "left": "right",
        "right": "left",
        "start": "end",
        "end": "start",
        "self-end": "self-start",
        "self-start": "self-end",
    },
    "flip-start": {},
}

INSET_AREA_PROPERTY_MAPPING: dict[TryTactic, dict[str, str]] = {
    "flip-block": {
        "top": "bottom",
        "bottom": "top",
        "start": "end",
        "end": "start",
    },
    "flip-inline": {
        "left": "right",
        "right": "left",
        "start": "end",
        "end": "start",
    },
    "flip-start": {},
}


def map_property(prop: str, tactic: TryTactic) -> str:
    return TRY_TACTICS_MAPPING[tactic].get(prop, prop)


def map_anchor_side(side: str, tactic: TryTactic) -> str:
    return ANCHOR_SIDE_MAPPING[tactic].get(side, side)


def map_inset_area(value: str, tactic: TryTactic) -> str:
    """Flip each `-`-separated chunk of an inset-area keyword independently."""
    mapping = INSET_AREA_PROPERTY_MAPPING[tactic]
    return "-".join(mapping.get(chunk, chunk) for chunk in value.split("-"))


def map_margin(prop: str, value: list[Node], tactic: TryTactic) -> list[Node]:
    """Reorder margin shorthand components for the given tactic.

    `margin` lists top, right, bottom, left; `margin-block` and
    `margin-inline` list start, end. Values whose component count does not
    need reordering are returned unchanged.
    """

    components = significant_nodes(value)
    reordered: list[Node] | None = None
    if prop == "margin":
        if tactic == "flip-block":
            if len(components) == 4:
                first, second, third, fourth = components
                reordered = [third, second, first, fourth]
            elif len(components) == 3:
                first, second, third = components
                reordered = [third, second, first]
        elif tactic == "flip-inline" and len(components) == 4:
            first, second, third, fourth = components
            reordered = [first, fourth, third, second]
    elif prop == "margin-block":
        if tactic == "flip-block" and len(components) == 2:
            reordered = [components[1], components[0]]
    elif prop == "margin-inline":
        if tactic == "flip-inline" and len(components) == 2:
            reordered = [components[1], components[0]]

    if reordered is None:
        return value
    return join_components(reordered)


def _flip_ident(node: Node, mapped: str) -> Node:
    # Keywords match case-insensitively; unchanged ones keep their source spelling.
    if mapped == node.lower_value:
        return node
    return replace_ident(node, mapped)


def _map_anchor_sides(value: list[Node], tactic: TryTactic) -> list[Node]:
    first = first_significant(value)
    if not is_anchor_function(first):
        return value
    arguments = [
        _flip_ident(arg, map_anchor_side(arg.lower_value, tactic))
        if is_ident(arg) and arg.lower_value in ANCHOR_SIDES
        else arg
        for arg in first.arguments
    ]
    flipped = replace_function_arguments(first, arguments)
    return [flipped if node is first else node for node in value]


def _map_inset_area_keywords(value: list[Node], tactic: TryTactic) -> list[Node]:
    return [
        _flip_ident(node, map_inset_area(node.lower_value, tactic))
        if is_ident(node) and is_inset_area_prop(node.lower_value)
        else node
        for node in value
    ]


def apply_try_tactic_to_block(rules: InsetRules, tactic: TryTactic) -> dict[str, str]:
    """Return the declarations `tactic` implies for `rules`.

    Keys follow `rules` insertion order, with synthesized `revert` entries
    placed where the renamed property was first seen.

    Raises:
        ValueError: `tactic` is not a known try-tactic.
        CssParseError: a value in `rules` is not valid CSS.
    """

    if tactic not in TRY_TACTICS:
        raise ValueError(f"unknown try-tactic {tactic!r}")

    declarations: dict[str, str] = {}
    for prop, raw_value in rules.items():
        value = parse_declaration_value(prop, raw_value)
        new_prop = map_property(prop, tactic)

        # Revert the original property unless something already set it.
        if new_prop != prop:
            declarations.setdefault(prop, REVERT)

        value = _map_anchor_sides(value, tactic)
        if prop == INSET_AREA_PROPERTY:
            value = _map_inset_area_keywords(value, tactic)
        if prop.startswith("margin"):
            value = map_margin(prop, value, tactic)

        declarations[new_prop] = generate_css(value)
    return declarations


# ---------------------------------------------------------------------------
# Element snapshots
# ---------------------------------------------------------------------------

def inset_custom_property(prop: str) -> str:
    """Custom property under which an element's active `prop` value is stored."""
    return f"--{prop}-{INSTANCE_UUID}"


def get_existing_inset_rules(read_property: PropertyReader) -> dict[str, str]:
    """Snapshot every accepted property the element currently sets."""

    rules: dict[str, str] = {}
    for prop in ACCEPTED_POSITION_TRY_PROPERTIES:
        prop_val = read_property(inset_custom_property(prop))
        if prop_val:
            rules[prop] = prop_val
    return rules


def apply_try_tactic(read_property: PropertyReader | None, tactic: TryTactic) -> dict[str, str] | None:
    """Apply `tactic` to an element's current declarations.

    `read_property` reads a custom property from the element handle; `None`
    means no element matched, in which case nothing is returned.
    """

    if read_property is None:
        return None
    rules = get_existing_inset_rules(read_property)
    return apply_try_tactic_to_block(rules, tactic)
