"""Tests for the anchor_positions CLI."""
from __future__ import annotations

import importlib.util
import json
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
FIXTURE = ROOT / "tests" / "fixtures" / "anchor" / "fallback.css"


def _load_module() -> object:
    script_path = ROOT / "scripts" / "anchor_positions.py"
    spec = importlib.util.spec_from_file_location("anchor_positions", script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


class TestAnchorPositionsCli:
    def test_css_report_written_to_file(self, tmp_path: Path) -> None:
        mod = _load_module()
        out_path = tmp_path / "report.json"
        rc = mod.main(["--css", str(FIXTURE), "--raw", "--output", str(out_path)])
        assert rc == 0
        report = json.loads(out_path.read_text(encoding="utf-8"))
        assert list(report) == ["raw", "positions"]
        floating = report["positions"]["#my-floating-fallback"]
        assert floating["top"]["anchor_elements"] == ["#my-anchor-fallback"]
        assert [list(block) for block in floating["fallback_positions"]] == [
            ["top", "left"],
            ["bottom", "left"],
            ["width"],
        ]
        assert report["raw"]["fallback_names"] == {"#my-floating-fallback": "--fallback1"}

    def test_rules_are_transformed(self, tmp_path: Path) -> None:
        mod = _load_module()
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"margin": "1px 2px 3px 4px", "top": "10px"}), encoding="utf-8")
        out_path = tmp_path / "out.json"
        rc = mod.main(["--rules", str(rules_path), "--tactic", "flip-inline", "--output", str(out_path)])
        assert rc == 0
        report = json.loads(out_path.read_text(encoding="utf-8"))
        assert report == {
            "tactic": "flip-inline",
            "declarations": {"margin": "1px 4px 3px 2px", "top": "10px"},
        }

    def test_unsupported_properties_are_rejected(self, tmp_path: Path) -> None:
        mod = _load_module()
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"top": "1px", "color": "red"}), encoding="utf-8")
        rc = mod.main(["--rules", str(rules_path)])
        assert rc == 2

    def test_invalid_value_exits_with_parse_error(self, tmp_path: Path) -> None:
        mod = _load_module()
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"top": "1px)"}), encoding="utf-8")
        rc = mod.main(["--rules", str(rules_path)])
        assert rc == 1

    def test_missing_stylesheet_exits_with_input_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        mod = _load_module()
        rc = mod.main(["--css", str(tmp_path / "missing.css")])
        assert rc == 2
        assert "cannot read stylesheet" in capsys.readouterr().err

    def test_non_utf8_stylesheet_exits_with_input_error(self, tmp_path: Path) -> None:
        mod = _load_module()
        css_path = tmp_path / "latin1.css"
        css_path.write_bytes(b".x { anchor-name: --\xff; }")
        rc = mod.main(["--css", str(css_path)])
        assert rc == 2

    def test_missing_rules_file_exits_with_input_error(self, tmp_path: Path) -> None:
        mod = _load_module()
        rc = mod.main(["--rules", str(tmp_path / "missing.json")])
        assert rc == 2

    def test_non_utf8_rules_file_exits_with_input_error(self, tmp_path: Path) -> None:
        mod = _load_module()
        rules_path = tmp_path / "rules.json"
        rules_path.write_bytes(b"\xff\xfe\x00")
        rc = mod.main(["--rules", str(rules_path)])
        assert rc == 2

    def test_tactic_without_rules_is_a_usage_error(self) -> None:
        mod = _load_module()
        with pytest.raises(SystemExit) as excinfo:
            mod.main(["--css", str(FIXTURE), "--tactic", "flip-inline"])
        assert excinfo.value.code == 2

    def test_rules_default_to_flip_block(self, tmp_path: Path) -> None:
        mod = _load_module()
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"top": "10px"}), encoding="utf-8")
        out_path = tmp_path / "out.json"
        rc = mod.main(["--rules", str(rules_path), "--output", str(out_path)])
        assert rc == 0
        report = json.loads(out_path.read_text(encoding="utf-8"))
        assert report == {"tactic": "flip-block", "declarations": {"top": "revert", "bottom": "10px"}}

    def test_stdout_json_via_subprocess(self) -> None:
        proc = subprocess.run(
            [sys.executable, str(ROOT / "scripts" / "anchor_positions.py"), "--css", str(FIXTURE)],
            capture_output=True,
            text=True,
            check=False,
        )
        assert proc.returncode == 0, proc.stderr
        report = json.loads(proc.stdout)
        assert ".tooltip-body" in report["positions"]
        assert "right" not in report["positions"][".tooltip-body"]
