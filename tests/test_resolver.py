"""Tests for anchor reference resolution."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from anchorpos.resolver import get_data_from_css, resolve_anchor_positions
from anchorpos.scanner import scan_stylesheet
from anchorpos.types import AnchorFunctionRef, raw_anchor_data_to_dict, resolved_positions_to_dict

FIXTURE = ROOT / "tests" / "fixtures" / "anchor" / "fallback.css"

_FALLBACK_RULE = (
    "@position-fallback --f {\n"
    "  @try { top: anchor(--a bottom); width: 10px; }\n"
    "  @try { bottom: anchor(--a top); }\n"
    "  @try { left: anchor(--nope right); height: 5px; }\n"
    "}\n"
)
_ELEMENTS = (
    ".x { anchor-name: --a; }\n"
    ".y { position-fallback: --f; top: anchor(--a top); }\n"
)


class TestDirectDeclarations:
    def test_resolves_anchor_elements(self) -> None:
        positions = get_data_from_css(".x { anchor-name: --a; } .y { top: anchor(--a top); }")
        top = positions[".y"].declarations["top"]
        assert top.anchor_elements == (".x",)
        assert top.anchor_element == ".x"

    def test_unresolved_property_is_omitted(self) -> None:
        positions = get_data_from_css(".y { top: anchor(--missing top); left: anchor(--missing left); }")
        assert ".y" in positions
        assert positions[".y"].declarations == {}
        assert positions[".y"].fallback_positions is None

    def test_first_declaring_element_wins(self) -> None:
        positions = get_data_from_css(
            ".first { anchor-name: --a; } .second { anchor-name: --a; } .y { top: anchor(--a top); }"
        )
        top = positions[".y"].declarations["top"]
        assert top.anchor_elements == (".first", ".second")
        assert top.anchor_element == ".first"

    def test_fallback_value_survives_resolution(self) -> None:
        positions = get_data_from_css(FIXTURE.read_text(encoding="utf-8"))
        bottom = positions[".tooltip-body"].declarations["bottom"]
        assert bottom.fallback_value == "0px"
        assert bottom.anchor_elements == (".tooltip",)
        assert "right" not in positions[".tooltip-body"].declarations


class TestFallbackPositions:
    def test_try_blocks_keep_source_order(self) -> None:
        positions = get_data_from_css(FIXTURE.read_text(encoding="utf-8"))
        fallbacks = positions["#my-floating-fallback"].fallback_positions
        assert fallbacks is not None
        assert [list(block) for block in fallbacks] == [["top", "left"], ["bottom", "left"], ["width"]]
        first = fallbacks[0]["top"]
        assert isinstance(first, AnchorFunctionRef)
        assert first.anchor_edge == "bottom"
        assert first.anchor_elements == ("#my-anchor-fallback",)

    def test_unresolved_try_entries_are_dropped(self) -> None:
        positions = get_data_from_css(_ELEMENTS + _FALLBACK_RULE)
        fallbacks = positions[".y"].fallback_positions
        assert fallbacks is not None
        assert fallbacks[2] == {"height": "5px"}
        assert fallbacks[0]["width"] == "10px"

    def test_fallback_rule_position_does_not_matter(self) -> None:
        before = resolved_positions_to_dict(get_data_from_css(_FALLBACK_RULE + _ELEMENTS))
        after = resolved_positions_to_dict(get_data_from_css(_ELEMENTS + _FALLBACK_RULE))
        assert before == after

    def test_unknown_fallback_name_yields_no_positions(self) -> None:
        positions = get_data_from_css(".x { anchor-name: --a; } .y { position-fallback: --nope; top: anchor(--a top); }")
        assert positions[".y"].fallback_positions is None
        assert positions[".y"].declarations["top"].anchor_elements == (".x",)

    def test_selectors_without_anchor_functions_are_not_reported(self) -> None:
        positions = get_data_from_css(_FALLBACK_RULE + ".x { anchor-name: --a; } .z { position-fallback: --f; }")
        assert positions == {}


class TestResolutionPurity:
    def test_resolution_is_idempotent(self) -> None:
        raw = scan_stylesheet(FIXTURE.read_text(encoding="utf-8"))
        first = resolve_anchor_positions(raw)
        second = resolve_anchor_positions(raw)
        assert first == second
        assert resolved_positions_to_dict(first) == resolved_positions_to_dict(second)

    def test_raw_maps_are_not_mutated(self) -> None:
        raw = scan_stylesheet(_ELEMENTS + _FALLBACK_RULE)
        snapshot = raw_anchor_data_to_dict(raw)
        resolve_anchor_positions(raw)
        assert raw_anchor_data_to_dict(raw) == snapshot
        assert raw.fallbacks["--f"][2]["left"] == AnchorFunctionRef(anchor_name="--nope", anchor_edge="right")

    def test_shared_fallback_is_copied_per_element(self) -> None:
        positions = get_data_from_css(
            _FALLBACK_RULE
            + ".x { anchor-name: --a; }\n"
            + ".one { position-fallback: --f; top: anchor(--a top); }\n"
            + ".two { position-fallback: --f; left: anchor(--a left); }\n"
        )
        one = positions[".one"].fallback_positions
        two = positions[".two"].fallback_positions
        assert one == two
        assert one is not two
        assert one is not None and two is not None
        assert one[0] is not two[0]


class TestReportSerialization:
    def test_resolved_positions_to_dict(self) -> None:
        payload = resolved_positions_to_dict(get_data_from_css(_ELEMENTS + _FALLBACK_RULE))
        assert payload == {
            ".y": {
                "top": {"anchor_name": "--a", "anchor_edge": "top", "anchor_elements": [".x"]},
                "fallback_positions": [
                    {
                        "top": {"anchor_name": "--a", "anchor_edge": "bottom", "anchor_elements": [".x"]},
                        "width": "10px",
                    },
                    {"bottom": {"anchor_name": "--a", "anchor_edge": "top", "anchor_elements": [".x"]}},
                    {"height": "5px"},
                ],
            },
        }
