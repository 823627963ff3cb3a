"""JSON I/O helpers for anchor reports and declaration snapshots."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def dump_json_bytes(obj: Any, *, pretty: bool = True) -> bytes:
    """Encode `obj`; key order is kept as inserted since it carries meaning."""
    if pretty:
        return orjson.dumps(obj, option=orjson.OPT_INDENT_2) + b"\n"
    return orjson.dumps(obj) + b"\n"


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_json_bytes(obj, pretty=pretty))


def load_css(path: Path) -> str:
    """Read stylesheet text as UTF-8, tolerating a BOM."""
    return path.read_text(encoding="utf-8-sig")
