"""Core types for anchor-positioning scan, resolve and try-tactic transforms."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal


type TryTactic = Literal["flip-block", "flip-inline", "flip-start"]
type TryBlockValue = str | AnchorFunctionRef
type TryBlock = dict[str, TryBlockValue]
type AnchorNameTable = dict[str, list[str]]
type AnchorFunctionDeclarations = dict[str, dict[str, AnchorFunctionRef]]
type FallbackNamePointer = dict[str, str]
type FallbackSet = dict[str, list[TryBlock]]
type InsetRules = Mapping[str, str]

TRY_TACTICS: tuple[TryTactic, ...] = ("flip-block", "flip-inline", "flip-start")

REVERT = "revert"


# ---------------------------------------------------------------------------
# Accepted position-try properties
# ---------------------------------------------------------------------------

MARGIN_PROPERTIES: tuple[str, ...] = (
    "margin-block-start",
    "margin-block-end",
    "margin-block",
    "margin-inline-start",
    "margin-inline-end",
    "margin-inline",
    "margin-bottom",
    "margin-left",
    "margin-right",
    "margin-top",
    "margin",
)

INSET_PROPERTIES: tuple[str, ...] = (
    "left",
    "right",
    "top",
    "bottom",
    "inset-block-start",
    "inset-block-end",
    "inset-inline-start",
    "inset-inline-end",
    "inset-block",
    "inset-inline",
    "inset",
)

SIZING_PROPERTIES: tuple[str, ...] = (
    "width",
    "height",
    "min-width",
    "min-height",
    "max-width",
    "max-height",
    "block-size",
    "inline-size",
    "min-block-size",
    "min-inline-size",
    "max-block-size",
    "max-inline-size",
)

SELF_ALIGNMENT_PROPERTIES: tuple[str, ...] = (
    "justify-self",
    "align-self",
    "place-self",
)

ACCEPTED_POSITION_TRY_PROPERTIES: tuple[str, ...] = (
    *MARGIN_PROPERTIES,
    *INSET_PROPERTIES,
    *SIZING_PROPERTIES,
    *SELF_ALIGNMENT_PROPERTIES,
    "position-anchor",
    "inset-area",
)

ANCHOR_SIDES: tuple[str, ...] = (
    "top",
    "left",
    "right",
    "bottom",
    "start",
    "end",
    "self-start",
    "self-end",
    "center",
)

INSET_AREA_PROPS: tuple[str, ...] = (
    "left",
    "center",
    "right",
    "span-left",
    "span-right",
    "x-start",
    "x-end",
    "span-x-start",
    "span-x-end",
    "x-self-start",
    "x-self-end",
    "span-x-self-start",
    "span-x-self-end",
    "span-all",
    "top",
    "bottom",
    "span-top",
    "span-bottom",
    "y-start",
    "y-end",
    "span-y-start",
    "span-y-end",
    "y-self-start",
    "y-self-end",
    "span-y-self-start",
    "span-y-self-end",
    "block-start",
    "block-end",
    "span-block-start",
    "span-block-end",
    "inline-start",
    "inline-end",
    "span-inline-start",
    "span-inline-end",
    "self-block-start",
    "self-block-end",
    "span-self-block-start",
    "span-self-block-end",
    "self-inline-start",
    "self-inline-end",
    "span-self-inline-start",
    "span-self-inline-end",
    "start",
    "end",
    "span-start",
    "span-end",
    "self-start",
    "self-end",
    "span-self-start",
    "span-self-end",
)


def is_accepted_property(name: str) -> bool:
    return name in ACCEPTED_POSITION_TRY_PROPERTIES


def is_inset_area_prop(value: str) -> bool:
    """True if `value` is one of the legacy `inset-area` keywords."""
    return value in INSET_AREA_PROPS


# ---------------------------------------------------------------------------
# Scan/resolve model
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AnchorFunctionRef:
    """One parsed `anchor()` call.

    `fallback_value` is the raw text after the first comma, kept verbatim.
    `anchor_elements` stays `None` until the reference is resolved against
    the anchor-name table.
    """

    anchor_name: str
    anchor_edge: str
    fallback_value: str | None = None
    anchor_elements: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not self.anchor_name:
            raise ValueError("anchor_name cannot be empty")
        if not self.anchor_edge:
            raise ValueError("anchor_edge cannot be empty")
        if self.anchor_elements is not None and not self.anchor_elements:
            raise ValueError("anchor_elements must be None or non-empty")

    @property
    def anchor_element(self) -> str | None:
        """First declaring selector; later ones with the same name are ignored."""
        if not self.anchor_elements:
            return None
        return self.anchor_elements[0]


@dataclass(frozen=True, slots=True)
class RawAnchorData:
    """Raw maps accumulated by one stylesheet scan, before resolution."""

    anchor_names: AnchorNameTable = field(default_factory=dict)
    anchor_functions: AnchorFunctionDeclarations = field(default_factory=dict)
    fallback_names: FallbackNamePointer = field(default_factory=dict)
    fallbacks: FallbackSet = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResolvedPosition:
    """Resolved anchor data for one floating-element selector."""

    declarations: dict[str, AnchorFunctionRef]
    fallback_positions: tuple[TryBlock, ...] | None = None

    def __post_init__(self) -> None:
        for prop, ref in self.declarations.items():
            if ref.anchor_elements is None:
                raise ValueError(f"declaration {prop!r} is not resolved")


def anchor_function_to_dict(ref: AnchorFunctionRef) -> dict[str, object]:
    payload: dict[str, object] = {
        "anchor_name": ref.anchor_name,
        "anchor_edge": ref.anchor_edge,
    }
    if ref.fallback_value is not None:
        payload["fallback_value"] = ref.fallback_value
    if ref.anchor_elements is not None:
        payload["anchor_elements"] = list(ref.anchor_elements)
    return payload


def try_block_to_dict(try_block: TryBlock) -> dict[str, object]:
    return {
        prop: anchor_function_to_dict(value) if isinstance(value, AnchorFunctionRef) else value
        for prop, value in try_block.items()
    }


def raw_anchor_data_to_dict(raw: RawAnchorData) -> dict[str, object]:
    """Serialize scan output to a JSON-safe dict, keeping source order."""

    return {
        "anchor_names": {name: list(selectors) for name, selectors in raw.anchor_names.items()},
        "anchor_functions": {
            selector: {prop: anchor_function_to_dict(ref) for prop, ref in fns.items()}
            for selector, fns in raw.anchor_functions.items()
        },
        "fallback_names": dict(raw.fallback_names),
        "fallbacks": {
            name: [try_block_to_dict(block) for block in blocks]
            for name, blocks in raw.fallbacks.items()
        },
    }


def resolved_positions_to_dict(positions: Mapping[str, ResolvedPosition]) -> dict[str, object]:
    """Serialize resolved positions to a JSON-safe dict, keeping source order."""

    payload: dict[str, object] = {}
    for selector, position in positions.items():
        row: dict[str, object] = {
            prop: anchor_function_to_dict(ref) for prop, ref in position.declarations.items()
        }
        row["fallback_positions"] = (
            None
            if position.fallback_positions is None
            else [try_block_to_dict(block) for block in position.fallback_positions]
        )
        payload[selector] = row
    return payload
