from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any

from linemarks.labels import DEFAULT_LABEL_PREFIX
from linemarks.palette import CATEGORY10


CONFIG_ENV_VAR = "LINEMARKS_CONFIG"


@dataclass(frozen=True)
class MarkDefaults:
    label_prefix: str = DEFAULT_LABEL_PREFIX
    stroke_width: float = 2.0
    marker_size: float = 64.0
    colors: tuple[str, ...] = field(default=CATEGORY10)


def load_mark_defaults(path: str | Path | None = None) -> MarkDefaults:
    """Read the `[marks]` table of a TOML file.

    With no explicit path the `LINEMARKS_CONFIG` environment variable is consulted;
    when that is unset too the built-in defaults are returned.
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR, "").strip()
        if not env_path:
            return MarkDefaults()
        path = env_path
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"mark config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get("marks", {})
    if not isinstance(table, dict):
        raise ValueError("[marks] must be a table")
    return _defaults_from_table(table)


def _defaults_from_table(table: dict[str, Any]) -> MarkDefaults:
    base = MarkDefaults()
    label_prefix = table.get("label_prefix", base.label_prefix)
    if not isinstance(label_prefix, str):
        raise ValueError("label_prefix must be a string")
    stroke_width = _coerce_positive(table.get("stroke_width", base.stroke_width), "stroke_width")
    marker_size = _coerce_positive(table.get("marker_size", base.marker_size), "marker_size")
    colors = table.get("colors", list(base.colors))
    if not isinstance(colors, list) or not colors or not all(isinstance(c, str) for c in colors):
        raise ValueError("colors must be a non-empty list of strings")
    return MarkDefaults(
        label_prefix=label_prefix,
        stroke_width=stroke_width,
        marker_size=marker_size,
        colors=tuple(colors),
    )


def _coerce_positive(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return float(value)
