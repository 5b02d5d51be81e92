from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import date
import logging
import math
from types import MappingProxyType
from typing import Any, Literal

import numpy as np

from linemarks.events import Observable, _values_equal


LOGGER = logging.getLogger(__name__)

ScaleDType = Literal["float", "date", "category"]


def flatten_values(value_sets: Any) -> list[Any]:
    """Flatten nested value sets (per-curve arrays, scalars, or a mix) into one list."""
    out: list[Any] = []
    _flatten_into(value_sets, out)
    return out


def _flatten_into(value: Any, out: list[Any]) -> None:
    if isinstance(value, np.ndarray) or (
        isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))
    ):
        for item in value:
            _flatten_into(item, out)
        return
    out.append(value)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, np.datetime64):
        return bool(np.isnat(value))
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


class Scale(Observable, ABC):
    """Shared scale whose visible domain merges contributions from many marks.

    Each contributor owns one key (`"<mark-id>_<dimension>"`). Marks only publish
    through `compute_and_set_domain` and retract through `del_domain`, so several
    marks can share a scale without touching each other's extents.
    """

    dtype: ScaleDType = "float"

    def __init__(self, *, reverse: bool = False, name: str | None = None) -> None:
        super().__init__()
        self.name = name
        self.reverse = reverse
        self._domains: dict[str, Any] = {}
        self._domain: Any = None

    @property
    def domain(self) -> Any:
        return self._domain

    @property
    def contributions(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._domains))

    def compute_and_set_domain(self, value_sets: Any, owner_key: str) -> None:
        values = [v for v in self._coerce_values(flatten_values(value_sets)) if not _is_missing(v)]
        if not values:
            LOGGER.debug("%s: %s has no usable values", self._describe(), owner_key)
            self.del_domain([], owner_key)
            return
        self.set_domain(self._extent(values), owner_key)

    def set_domain(self, domain: Any, owner_key: str) -> None:
        self._domains[owner_key] = domain
        self._refresh()

    def del_domain(self, domain: Any, owner_key: str) -> None:
        if owner_key not in self._domains:
            return
        del self._domains[owner_key]
        LOGGER.debug("%s: dropped contribution %s", self._describe(), owner_key)
        self._refresh()

    def _refresh(self) -> None:
        merged = self._merge()
        if _values_equal(merged, self._domain):
            return
        self._domain = merged
        LOGGER.debug("%s: domain -> %s", self._describe(), merged)
        self.trigger("domain_changed", merged)

    def _describe(self) -> str:
        return f"{type(self).__name__}({self.name})" if self.name else type(self).__name__

    @abstractmethod
    def _coerce_values(self, values: list[Any]) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def _extent(self, values: list[Any]) -> Any:
        raise NotImplementedError

    @abstractmethod
    def _merge(self) -> Any:
        raise NotImplementedError


class LinearScale(Scale):
    dtype: ScaleDType = "float"

    def __init__(
        self,
        *,
        min: Any = None,
        max: Any = None,
        reverse: bool = False,
        name: str | None = None,
    ) -> None:
        super().__init__(reverse=reverse, name=name)
        self._attrs.update(min=self._coerce_bound(min), max=self._coerce_bound(max))
        self.on_change(["min", "max"], lambda _event: self._refresh())
        self._refresh()

    @property
    def min(self) -> Any:
        return self.get("min")

    @property
    def max(self) -> Any:
        return self.get("max")

    def set_bounds(self, *, min: Any = None, max: Any = None) -> None:
        self.set(min=self._coerce_bound(min), max=self._coerce_bound(max))

    def _coerce_bound(self, value: Any) -> Any:
        return None if value is None else float(value)

    def _coerce_values(self, values: list[Any]) -> list[Any]:
        out: list[float] = []
        for raw in values:
            if raw is None:
                continue
            try:
                out.append(float(raw))
            except (TypeError, ValueError):
                LOGGER.debug("%s: skipping non-numeric value %r", self._describe(), raw)
        return out

    def _extent(self, values: list[Any]) -> tuple[Any, Any]:
        return (min(values), max(values))

    def _merge(self) -> Any:
        lows = [extent[0] for extent in self._domains.values()]
        highs = [extent[1] for extent in self._domains.values()]
        lo = self.min if self.min is not None else (min(lows) if lows else None)
        hi = self.max if self.max is not None else (max(highs) if highs else None)
        if lo is None or hi is None:
            return None
        return (lo, hi)


class DateScale(LinearScale):
    dtype: ScaleDType = "date"

    def _coerce_bound(self, value: Any) -> Any:
        return None if value is None else np.datetime64(value, "ns")

    def _coerce_values(self, values: list[Any]) -> list[Any]:
        out: list[np.datetime64] = []
        for raw in values:
            if isinstance(raw, (np.datetime64, date)):
                out.append(np.datetime64(raw, "ns"))
            elif raw is not None:
                LOGGER.debug("%s: skipping non-temporal value %r", self._describe(), raw)
        return out


class ColorScale(LinearScale):
    """Linear color scale; a `mid` value splits the domain into (min, mid, max)."""

    def __init__(
        self,
        *,
        min: Any = None,
        max: Any = None,
        mid: float | None = None,
        reverse: bool = False,
        name: str | None = None,
    ) -> None:
        super().__init__(min=min, max=max, reverse=reverse, name=name)
        self.set(mid=None if mid is None else float(mid))
        self.on_change("mid", lambda _event: self._refresh())
        self._refresh()

    @property
    def mid(self) -> float | None:
        return self._attrs.get("mid")

    def _merge(self) -> Any:
        extent = super()._merge()
        if extent is None or self.mid is None:
            return extent
        return (extent[0], self.mid, extent[1])


class OrdinalScale(Scale):
    """Categorical scale; the domain is the ordered union of every owner's categories."""

    dtype: ScaleDType = "category"

    def _coerce_values(self, values: list[Any]) -> list[Any]:
        return [v.item() if isinstance(v, np.generic) and not isinstance(v, np.datetime64) else v for v in values]

    def _extent(self, values: list[Any]) -> tuple[Any, ...]:
        return tuple(dict.fromkeys(values))

    def _merge(self) -> Any:
        merged: dict[Any, None] = {}
        for categories in self._domains.values():
            merged.update(dict.fromkeys(categories))
        return tuple(merged) if merged else None
