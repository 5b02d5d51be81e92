from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
import logging
from types import MappingProxyType
from typing import Any, Literal
import uuid

import numpy as np

from linemarks.config import MarkDefaults
from linemarks.domains import DIMENSIONS, DomainAggregator, DomainScale
from linemarks.errors import MarkDataError
from linemarks.events import ChangeEvent, Observable
from linemarks.fields import TypedField, empty_field, read_typed_field
from linemarks.labels import resolve_labels
from linemarks.palette import default_colors
from linemarks.reshape import (
    curve_count,
    is_empty,
    promote_2d,
    reshape_curves,
    reshape_segments,
    segment_data_len,
)
from linemarks.series import Curve, SegmentSeries


LOGGER = logging.getLogger(__name__)

ModelState = Literal["clean", "dirty"]

LABELS_VISIBILITY = frozenset({"none", "label"})
LINE_STYLES = frozenset({"solid", "dashed", "dotted", "dash_dotted"})
INTERPOLATIONS = frozenset(
    {
        "linear",
        "basis",
        "basis-open",
        "basis-closed",
        "bundle",
        "cardinal",
        "cardinal-open",
        "cardinal-closed",
        "monotone",
        "step-before",
        "step-after",
    }
)
FILL_MODES = frozenset({"none", "top", "bottom", "inside", "between"})
MARKERS = frozenset(
    {
        "circle",
        "cross",
        "diamond",
        "square",
        "triangle-down",
        "triangle-up",
        "arrow",
        "rectangle",
        "ellipse",
    }
)


def _choice(name: str, allowed: frozenset[str], *, optional: bool = False) -> Callable[[Any], Any]:
    def validate(value: Any) -> Any:
        if value is None and optional:
            return None
        if value not in allowed:
            raise MarkDataError(f"{name} must be one of {sorted(allowed)}, got {value!r}")
        return value

    return validate


def _positive(name: str) -> Callable[[Any], float]:
    def validate(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise MarkDataError(f"{name} must be a number, got {value!r}")
        if value <= 0:
            raise MarkDataError(f"{name} must be > 0")
        return float(value)

    return validate


def _string_list(name: str) -> Callable[[Any], list[str]]:
    def validate(value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, np.ndarray)):
            raise MarkDataError(f"{name} must be a list of strings")
        return [str(item) for item in value]

    return validate


def _unit_interval_list(name: str) -> Callable[[Any], list[float]]:
    def validate(value: Any) -> list[float]:
        if value is None:
            return []
        if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, np.ndarray)):
            raise MarkDataError(f"{name} must be a list of numbers")
        out = [float(v) for v in value]
        if any(not 0.0 <= v <= 1.0 for v in out):
            raise MarkDataError(f"{name} values must lie in [0, 1]")
        return out

    return validate


def _int_list(value: Any) -> list[int]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, np.ndarray)):
        raise MarkDataError("curves_subset must be a list of curve indices")
    out: list[int] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, np.integer)):
            raise MarkDataError(f"curves_subset entries must be integers, got {item!r}")
        out.append(int(item))
    return out


def _flag(name: str) -> Callable[[Any], bool]:
    def validate(value: Any) -> bool:
        if not isinstance(value, (bool, np.bool_)):
            raise MarkDataError(f"{name} must be a bool")
        return bool(value)

    return validate


def _preserve_domain(value: Any) -> dict[str, bool]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise MarkDataError("preserve_domain must map dimension names to bools")
    unknown = set(value) - set(DIMENSIONS)
    if unknown:
        raise MarkDataError(f"preserve_domain has unknown dimensions: {sorted(unknown)}")
    return {str(dim): _flag(f"preserve_domain[{dim!r}]")(flag) for dim, flag in value.items()}


_STYLE_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "labels": _string_list("labels"),
    "preserve_domain": _preserve_domain,
    "colors": _string_list("colors"),
    "fill_colors": _string_list("fill_colors"),
    "stroke_width": _positive("stroke_width"),
    "labels_visibility": _choice("labels_visibility", LABELS_VISIBILITY),
    "curves_subset": _int_list,
    "line_style": _choice("line_style", LINE_STYLES),
    "interpolation": _choice("interpolation", INTERPOLATIONS),
    "close_path": _flag("close_path"),
    "fill": _choice("fill", FILL_MODES),
    "marker": _choice("marker", MARKERS, optional=True),
    "marker_size": _positive("marker_size"),
    "opacities": _unit_interval_list("opacities"),
    "fill_opacities": _unit_interval_list("fill_opacities"),
}


class MarkModel(Observable, ABC):
    """Data model of a line mark: geometry plus its share of the scale domains.

    Any change to a data field rebuilds the geometry from scratch, re-resolves the
    curve names and republishes every domain before `"data_updated"` fires. Label
    changes only rename (`"labels_updated"`); `preserve_domain` changes only touch
    the domains of the flipped dimensions (`"domains_updated"`).

    Subclasses provide `reshape()`, `resolve_labels()` and `domain_values()`.
    """

    data_fields: tuple[str, ...] = ("x", "y", "color")
    dimensions: tuple[str, ...] = ("x", "y", "color")
    scales_metadata: Mapping[str, Mapping[str, str]] = MappingProxyType(
        {
            "x": MappingProxyType({"orientation": "horizontal", "dimension": "x"}),
            "y": MappingProxyType({"orientation": "vertical", "dimension": "y"}),
            "color": MappingProxyType({"dimension": "color"}),
        }
    )

    def __init__(
        self,
        *,
        scales: Mapping[str, DomainScale | None],
        model_id: str | None = None,
        defaults: MarkDefaults | None = None,
        **attrs: Any,
    ) -> None:
        super().__init__()
        self.model_id = model_id or uuid.uuid4().hex
        self.defaults = defaults or MarkDefaults()
        self.scales: dict[str, DomainScale | None] = dict(scales)
        self.dirty = False
        self.mark_data: list[Any] | None = None
        self.x_data: list[np.ndarray] = []
        self.y_data: list[np.ndarray] = []
        self._typed: dict[str, TypedField] = {name: empty_field() for name in self.data_fields}
        self._recompute_pending = False
        self._staged_typed: dict[str, TypedField] = {}
        self._aggregator = DomainAggregator(self.model_id)

        initial = self._default_attrs()
        unknown = set(attrs) - set(initial)
        if unknown:
            raise MarkDataError(f"unknown {type(self).__name__} attributes: {sorted(unknown)}")
        initial.update(attrs)
        validated, typed = self._validate(initial)
        self._attrs.update(validated)
        self._typed.update(typed)

        self.on_change(list(self.data_fields), self._on_data_change)
        self.on_change("labels", self._on_labels_change)
        self.on_change("preserve_domain", self._on_preserve_domain_change)
        self.update_data()

    def _default_attrs(self) -> dict[str, Any]:
        return {
            "x": [],
            "y": [],
            "color": None,
            "labels": [],
            "preserve_domain": {},
            "colors": default_colors(self.defaults.colors),
            "fill_colors": default_colors(self.defaults.colors),
            "stroke_width": self.defaults.stroke_width,
            "labels_visibility": "none",
            "curves_subset": [],
            "line_style": "solid",
            "interpolation": "linear",
            "close_path": False,
            "fill": "none",
            "marker": None,
            "marker_size": self.defaults.marker_size,
            "opacities": [],
            "fill_opacities": [],
        }

    @property
    def state(self) -> ModelState:
        return "dirty" if self.dirty else "clean"

    @property
    def labels(self) -> list[str]:
        return list(self.get("labels"))

    @property
    def preserve_domain(self) -> dict[str, bool]:
        return dict(self.get("preserve_domain"))

    def update(self, changes: Mapping[str, Any]) -> ChangeEvent:
        unknown = set(changes) - set(self._attrs)
        if unknown:
            raise MarkDataError(f"unknown {type(self).__name__} attributes: {sorted(unknown)}")
        validated, typed = self._validate(changes)
        self._staged_typed = typed
        try:
            return super().update(validated)
        finally:
            self._staged_typed = {}

    def _commit(self, name: str, value: Any) -> None:
        super()._commit(name, value)
        # Typed arrays follow the raw value only when the change is accepted.
        if name in self._staged_typed:
            self._typed[name] = self._staged_typed[name]

    def _validate(self, changes: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, TypedField]]:
        validated: dict[str, Any] = {}
        typed: dict[str, TypedField] = {}
        for name, value in changes.items():
            if name in self.data_fields:
                typed[name] = read_typed_field(value, label=name)
                validated[name] = value
            else:
                validated[name] = _STYLE_VALIDATORS[name](value)
        return validated, typed

    def get_typed_field(self, name: str) -> TypedField:
        return self._typed[name]

    @abstractmethod
    def reshape(self) -> None:
        raise NotImplementedError

    def resolve_labels(self) -> list[str]:
        return resolve_labels(
            self.get("labels"),
            curve_count(self.x_data, self.y_data),
            prefix=self.defaults.label_prefix,
        )

    @abstractmethod
    def domain_values(self) -> dict[str, Any] | None:
        raise NotImplementedError

    def is_preserved(self, dimension: str) -> bool:
        return bool(self.get("preserve_domain").get(dimension, False))

    def aggregate_domains(self, dimensions: Iterable[str] | None = None) -> None:
        self._aggregator.aggregate(
            self.scales,
            self.domain_values(),
            self.is_preserved,
            self.dimensions if dimensions is None else dimensions,
        )

    def update_data(self) -> None:
        if self.dirty:
            # A handler fired mid-recompute asked for another pass; run it afterwards.
            self._recompute_pending = True
            return
        try:
            while True:
                self._recompute_pending = False
                self.dirty = True
                self.reshape()
                self.aggregate_domains()
                self.dirty = False
                LOGGER.debug(
                    "%s %s: data updated (%d items)", type(self).__name__, self.model_id, len(self.mark_data or ())
                )
                self.trigger("data_updated")
                if not self._recompute_pending:
                    return
        finally:
            self.dirty = False
            self._recompute_pending = False

    def update_labels(self) -> None:
        labels = self.resolve_labels()
        for element, name in zip(self.mark_data or (), labels):
            element.name = name
        self.trigger("labels_updated")

    def _on_data_change(self, event: ChangeEvent) -> None:
        self.update_data()

    def _on_labels_change(self, event: ChangeEvent) -> None:
        self.update_labels()

    def _on_preserve_domain_change(self, event: ChangeEvent) -> None:
        old = event.previous.get("preserve_domain") or {}
        new = self.get("preserve_domain")
        flipped = [d for d in self.dimensions if bool(old.get(d, False)) != bool(new.get(d, False))]
        if not flipped:
            return
        self.aggregate_domains(flipped)
        self.trigger("domains_updated")


class LinesModel(MarkModel):
    """Multi-curve polyline mark; one `Curve` per y series."""

    mark_data: list[Curve] | None

    def reshape(self) -> None:
        x_field = self.get_typed_field("x")
        y_field = self.get_typed_field("y")
        self.color_data = self.get_typed_field("color")
        if is_empty(x_field) or is_empty(y_field):
            self.x_data = []
            self.y_data = []
            self.mark_data = []
            return
        self.x_data = promote_2d(x_field)
        self.y_data = promote_2d(y_field)
        self.mark_data = reshape_curves(self.x_data, self.y_data, self.color_data, self.resolve_labels())

    def domain_values(self) -> dict[str, Any] | None:
        if self.mark_data is None:
            return None
        return {
            "x": [[point.x for point in curve.values] for curve in self.mark_data],
            "y": [[point.y for point in curve.values] for curve in self.mark_data],
            "color": [curve.color for curve in self.mark_data],
        }


class FlexLineModel(MarkModel):
    """Single-series mark drawn as segments with per-segment color and width."""

    data_fields = ("x", "y", "color", "width")
    dimensions = ("x", "y", "color", "width")
    scales_metadata = MappingProxyType(
        {
            **MarkModel.scales_metadata,
            "width": MappingProxyType({"dimension": "width"}),
        }
    )

    mark_data: list[SegmentSeries] | None

    def __init__(self, **kwargs: Any) -> None:
        self.data_len = 0
        super().__init__(**kwargs)

    def _default_attrs(self) -> dict[str, Any]:
        attrs = super()._default_attrs()
        attrs["width"] = None
        return attrs

    def reshape(self) -> None:
        x_field = self.get_typed_field("x")
        y_field = self.get_typed_field("y")
        if is_empty(x_field) or is_empty(y_field):
            self.x_data = []
            self.y_data = []
            self.mark_data = []
            self.data_len = 0
            return
        self.x_data = promote_2d(x_field)
        self.y_data = promote_2d(y_field)
        self.data_len = segment_data_len(self.x_data, self.y_data)
        name = self.resolve_labels()[0]
        self.mark_data = [
            reshape_segments(
                self.x_data,
                self.y_data,
                self.get_typed_field("color"),
                self.get_typed_field("width"),
                name,
            )
        ]

    def domain_values(self) -> dict[str, Any] | None:
        if self.mark_data is None:
            return None
        if not self.mark_data:
            return {dim: [] for dim in self.dimensions}
        return {
            "x": self.x_data[0][: self.data_len],
            "y": self.y_data[0][: self.data_len],
            "color": [[segment.color for segment in series.values] for series in self.mark_data],
            "width": [[segment.size for segment in series.values] for series in self.mark_data],
        }
