from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CurvePoint:
    x: Any
    y: Any
    sub_index: int


@dataclass
class Curve:
    """One polyline of a multi-curve mark.

    `index` is the curve's position in the input and survives renames; only `name`
    is rewritten in place when labels change.
    """

    name: str
    values: list[CurvePoint] = field(default_factory=list)
    color: Any = None
    index: int = 0


@dataclass(frozen=True)
class SegmentPoint:
    x1: Any
    y1: Any
    x2: Any
    y2: Any
    color: Any = None
    size: Any = None


@dataclass
class SegmentSeries:
    name: str
    values: list[SegmentPoint] = field(default_factory=list)
