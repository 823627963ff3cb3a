#!/usr/bin/env python3
"""Resolve anchor-positioning fallbacks and apply try-tactics.

Usage:
    # Scan a stylesheet and print resolved anchor positions
    python3 scripts/anchor_positions.py --css styles.css

    # Include the raw scan maps alongside the resolved positions
    python3 scripts/anchor_positions.py --css styles.css --raw

    # Flip a declaration set (JSON object of property -> value)
    python3 scripts/anchor_positions.py --rules rules.json --tactic flip-block

Outputs structured JSON to stdout, human messages to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from anchorpos.css_grammar import CssParseError
from anchorpos.io_utils import dump_json_bytes, load_css, load_json, save_json
from anchorpos.resolver import resolve_anchor_positions
from anchorpos.scanner import scan_stylesheet
from anchorpos.tactics import apply_try_tactic_to_block
from anchorpos.types import (
    TRY_TACTICS,
    is_accepted_property,
    raw_anchor_data_to_dict,
    resolved_positions_to_dict,
)

log = logging.getLogger("anchor_positions")


class InputError(ValueError):
    """Raised when CLI input files are not usable."""


def load_rules(path: Path) -> dict[str, str]:
    """Load a declaration set, rejecting anything outside the accepted properties."""
    try:
        payload = load_json(path)
    except orjson.JSONDecodeError as exc:
        raise InputError(f"{path}: invalid JSON: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f"{path}: cannot read rules: {exc}") from exc
    if not isinstance(payload, dict):
        raise InputError(f"{path}: expected a JSON object of property -> value")
    rules: dict[str, str] = {}
    rejected: list[str] = []
    for prop, value in payload.items():
        if not is_accepted_property(prop):
            rejected.append(prop)
            continue
        if not isinstance(value, str):
            raise InputError(f"{path}: value for {prop!r} must be a string")
        rules[prop] = value
    if rejected:
        raise InputError(f"{path}: unsupported properties: {', '.join(rejected)}")
    return rules


def read_stylesheet(path: Path) -> str:
    try:
        return load_css(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f"{path}: cannot read stylesheet: {exc}") from exc


def build_report(args: argparse.Namespace) -> dict[str, object]:
    report: dict[str, object] = {}
    if args.css is not None:
        raw = scan_stylesheet(read_stylesheet(args.css))
        positions = resolve_anchor_positions(raw)
        log.info("resolved %d floating selectors from %s", len(positions), args.css)
        if args.raw:
            report["raw"] = raw_anchor_data_to_dict(raw)
        report["positions"] = resolved_positions_to_dict(positions)
    if args.rules is not None:
        rules = load_rules(args.rules)
        report["tactic"] = args.tactic
        report["declarations"] = apply_try_tactic_to_block(rules, args.tactic)
    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve CSS anchor-positioning fallbacks and apply try-tactics.",
    )
    parser.add_argument("--css", type=Path, default=None, help="Stylesheet to scan and resolve")
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Also emit the raw scan maps (requires --css)",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="JSON object of active declarations to transform",
    )
    parser.add_argument(
        "--tactic",
        choices=TRY_TACTICS,
        default=None,
        help="Try-tactic applied to --rules (default: flip-block)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    if args.css is None and args.rules is None:
        parser.error("one of --css or --rules is required")
    if args.raw and args.css is None:
        parser.error("--raw requires --css")
    if args.tactic is not None and args.rules is None:
        parser.error("--tactic requires --rules")
    if args.tactic is None:
        args.tactic = "flip-block"

    try:
        report = build_report(args)
    except InputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except CssParseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output is not None:
        save_json(report, args.output)
        print(f"wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.buffer.write(dump_json_bytes(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
