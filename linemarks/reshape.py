from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Any

import numpy as np

from linemarks.fields import TypedField, is_nested
from linemarks.series import Curve, CurvePoint, SegmentPoint, SegmentSeries


LOGGER = logging.getLogger(__name__)


def is_empty(field: TypedField) -> bool:
    return len(field) == 0


def promote_2d(field: TypedField) -> list[np.ndarray]:
    """Wrap a flat (shared) series so every field is a list of per-curve arrays."""
    if is_nested(field):
        return list(field)  # type: ignore[arg-type]
    return [field]  # type: ignore[list-item]


def is_shared_x(x_data: Sequence[Any], y_data: Sequence[Any]) -> bool:
    return len(x_data) == 1 and len(y_data) > 1


def curve_count(x_data: Sequence[Any], y_data: Sequence[Any]) -> int:
    if is_shared_x(x_data, y_data):
        return len(y_data)
    return min(len(x_data), len(y_data))


def element_at(field: TypedField, index: int) -> Any:
    """Return `field[index]` as a Python scalar, or None past the end."""
    if index >= len(field):
        return None
    value = field[index]
    if isinstance(value, (np.ndarray, np.datetime64)):
        return value
    return value.item() if isinstance(value, np.generic) else value


def reshape_curves(
    x_data: list[np.ndarray],
    y_data: list[np.ndarray],
    color_data: TypedField,
    names: Sequence[str],
) -> list[Curve]:
    """Pair promoted x/y series into curves.

    With one x series and several y series every curve shares that x series.
    Otherwise curve `i` zips `x_data[i]` with `y_data[i]`, truncating to the shorter.
    """
    shared = is_shared_x(x_data, y_data)
    curves: list[Curve] = []
    for i, name in enumerate(names):
        xs = x_data[0] if shared else x_data[i]
        ys = y_data[i]
        n = min(len(xs), len(ys))
        if len(xs) != len(ys):
            LOGGER.debug("curve %d: x/y length mismatch %d != %d, truncating to %d", i, len(xs), len(ys), n)
        points = [CurvePoint(x=element_at(xs, j), y=element_at(ys, j), sub_index=j) for j in range(n)]
        curves.append(Curve(name=name, values=points, color=element_at(color_data, i), index=i))
    return curves


def segment_data_len(x_data: list[np.ndarray], y_data: list[np.ndarray]) -> int:
    return min(len(x_data[0]), len(y_data[0]))


def reshape_segments(
    x_data: list[np.ndarray],
    y_data: list[np.ndarray],
    color_data: TypedField,
    width_data: TypedField,
    name: str,
) -> SegmentSeries:
    """Split the first x/y series into consecutive segments.

    Each segment takes the color and width of its left endpoint.
    """
    xs = x_data[0]
    ys = y_data[0]
    data_len = segment_data_len(x_data, y_data)
    values = [
        SegmentPoint(
            x1=element_at(xs, i),
            y1=element_at(ys, i),
            x2=element_at(xs, i + 1),
            y2=element_at(ys, i + 1),
            color=element_at(color_data, i),
            size=element_at(width_data, i),
        )
        for i in range(data_len - 1)
    ]
    return SegmentSeries(name=name, values=values)
