from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Union

import numpy as np

from linemarks.errors import MarkDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


# A flat array is shared by every curve; a list of arrays holds one array per curve.
TypedField = Union[np.ndarray, list[np.ndarray]]


def empty_field() -> np.ndarray:
    return np.empty(0, dtype=np.float64)


def is_nested(field: TypedField) -> bool:
    return isinstance(field, list)


def read_typed_field(value: Any, *, label: str) -> TypedField:
    """Normalize a raw mark attribute into a flat array or a list of per-curve arrays.

    Numeric input becomes float64 (None -> NaN), temporal input becomes datetime64 and
    anything else is kept as a categorical object array. Raises `MarkDataError` for
    inputs that have no array reading.
    """
    if value is None:
        return empty_field()

    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return _from_ndarray(tensor.numpy(), label=label)

    if pd is not None and isinstance(value, pd.DataFrame):
        return [_coerce_1d(value[col].to_numpy(), label=f"{label}[{col!r}]") for col in value.columns]

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_1d(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        return _from_ndarray(value, label=label)

    if isinstance(value, (str, bytes, bytearray, Mapping, Set)) or not isinstance(value, Sequence):
        raise MarkDataError(f"unsupported {label} input type: {type(value)!r}")

    if len(value) == 0:
        return empty_field()
    if _is_array_like(value[0]):
        rows: list[np.ndarray] = []
        for i, row in enumerate(value):
            if not _is_array_like(row):
                raise MarkDataError(f"{label} mixes nested and scalar entries at index {i}")
            rows.append(_coerce_1d(np.asarray(list(row), dtype=object), label=f"{label}[{i}]"))
        return rows
    return _coerce_1d(np.asarray(value, dtype=object), label=label)


def _is_array_like(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return True
    if pd is not None and isinstance(value, pd.Series):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _from_ndarray(arr: np.ndarray, *, label: str) -> TypedField:
    if arr.ndim == 0:
        raise MarkDataError(f"{label} must be 1-D or 2-D, got a scalar")
    if arr.ndim == 1:
        if arr.dtype == object and arr.size and _is_array_like(arr[0]):
            return [_coerce_1d(np.asarray(list(row), dtype=object), label=f"{label}[{i}]") for i, row in enumerate(arr)]
        return _coerce_1d(arr, label=label)
    if arr.ndim == 2:
        return [_coerce_1d(row, label=f"{label}[{i}]") for i, row in enumerate(arr)]
    raise MarkDataError(f"{label} must be 1-D or 2-D, got {arr.ndim}-D")


def _coerce_1d(arr: np.ndarray, *, label: str) -> np.ndarray:
    kind = arr.dtype.kind
    if kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)
    if kind == "M":
        return arr
    if kind in {"U", "S"}:
        return arr.astype(object)
    if kind != "O":
        raise MarkDataError(f"unsupported {label} element dtype: {arr.dtype}")

    items = arr.tolist()
    present = [v for v in items if v is not None]
    if present and all(isinstance(v, (datetime, date, np.datetime64)) for v in present):
        return np.asarray([np.datetime64("NaT") if v is None else np.datetime64(v) for v in items]).astype(
            "datetime64[ns]"
        )

    out = np.empty(len(items), dtype=np.float64)
    for i, raw in enumerate(items):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, (str, bytes)):
            return _categorical(items)
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError):
            return _categorical(items)
    return out


def _categorical(items: list[Any]) -> np.ndarray:
    out = np.empty(len(items), dtype=object)
    for i, raw in enumerate(items):
        out[i] = None if raw is None else (raw.decode() if isinstance(raw, bytes) else str(raw))
    return out
