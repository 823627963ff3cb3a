"""Second pass: resolve scanned anchor references against declared anchor names."""

from __future__ import annotations

import dataclasses
import logging

from anchorpos.scanner import scan_stylesheet
from anchorpos.types import (
    AnchorFunctionRef,
    AnchorNameTable,
    RawAnchorData,
    ResolvedPosition,
    TryBlock,
)

log = logging.getLogger(__name__)


def resolve_anchor_function(
    ref: AnchorFunctionRef,
    anchor_names: AnchorNameTable,
) -> AnchorFunctionRef | None:
    """Attach the declaring selectors to `ref`, or `None` if the name is undeclared."""

    anchor_elements = anchor_names.get(ref.anchor_name)
    if not anchor_elements:
        return None
    return dataclasses.replace(ref, anchor_elements=tuple(anchor_elements))


def resolve_try_block(try_block: TryBlock, anchor_names: AnchorNameTable) -> TryBlock:
    """Copy a try block with its anchor() values resolved; unresolved ones are dropped."""

    resolved: TryBlock = {}
    for prop, value in try_block.items():
        if isinstance(value, AnchorFunctionRef):
            ref = resolve_anchor_function(value, anchor_names)
            if ref is None:
                log.debug("dropping unresolved anchor %s for %s in try block", value.anchor_name, prop)
                continue
            resolved[prop] = ref
        else:
            resolved[prop] = value
    return resolved


def resolve_anchor_positions(raw: RawAnchorData) -> dict[str, ResolvedPosition]:
    """Build the resolved positioning descriptor for every floating selector.

    Must only be called once the whole stylesheet has been scanned, since
    fallback rules may appear after the elements that reference them.
    """

    positions: dict[str, ResolvedPosition] = {}
    for floating_el, anchor_fns in raw.anchor_functions.items():
        fallback_name = raw.fallback_names.get(floating_el)
        position_fallbacks = raw.fallbacks.get(fallback_name) if fallback_name else None
        fallback_positions: tuple[TryBlock, ...] | None = None
        if position_fallbacks is not None:
            fallback_positions = tuple(
                resolve_try_block(try_block, raw.anchor_names) for try_block in position_fallbacks
            )
        elif fallback_name:
            log.debug("%s references unknown fallback %s", floating_el, fallback_name)

        declarations: dict[str, AnchorFunctionRef] = {}
        for floating_edge, anchor_obj in anchor_fns.items():
            ref = resolve_anchor_function(anchor_obj, raw.anchor_names)
            if ref is None:
                log.debug("dropping unresolved anchor %s for %s { %s }", anchor_obj.anchor_name, floating_el, floating_edge)
                continue
            declarations[floating_edge] = ref

        positions[floating_el] = ResolvedPosition(
            declarations=declarations,
            fallback_positions=fallback_positions,
        )
    return positions


def get_data_from_css(css_text: str) -> dict[str, ResolvedPosition]:
    """Scan `css_text` and resolve its anchor references."""
    return resolve_anchor_positions(scan_stylesheet(css_text))
