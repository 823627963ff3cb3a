"""CSS anchor-positioning fallback resolution and try-tactic transforms."""

from anchorpos.css_grammar import CssParseError, generate_css, parse_declaration_value
from anchorpos.resolver import (
    get_data_from_css,
    resolve_anchor_function,
    resolve_anchor_positions,
    resolve_try_block,
)
from anchorpos.scanner import parse_anchor_function, scan_stylesheet
from anchorpos.tactics import (
    INSTANCE_UUID,
    apply_try_tactic,
    apply_try_tactic_to_block,
    get_existing_inset_rules,
    inset_custom_property,
)
from anchorpos.types import (
    ACCEPTED_POSITION_TRY_PROPERTIES,
    ANCHOR_SIDES,
    REVERT,
    TRY_TACTICS,
    AnchorFunctionRef,
    RawAnchorData,
    ResolvedPosition,
    TryBlock,
    TryTactic,
    is_accepted_property,
    is_inset_area_prop,
    raw_anchor_data_to_dict,
    resolved_positions_to_dict,
)

__all__ = [
    "ACCEPTED_POSITION_TRY_PROPERTIES",
    "ANCHOR_SIDES",
    "AnchorFunctionRef",
    "CssParseError",
    "INSTANCE_UUID",
    "REVERT",
    "RawAnchorData",
    "ResolvedPosition",
    "TRY_TACTICS",
    "TryBlock",
    "TryTactic",
    "apply_try_tactic",
    "apply_try_tactic_to_block",
    "generate_css",
    "get_data_from_css",
    "get_existing_inset_rules",
    "inset_custom_property",
    "is_accepted_property",
    "is_inset_area_prop",
    "parse_anchor_function",
    "parse_declaration_value",
    "raw_anchor_data_to_dict",
    "resolve_anchor_function",
    "resolve_anchor_positions",
    "resolve_try_block",
    "resolved_positions_to_dict",
    "scan_stylesheet",
]
