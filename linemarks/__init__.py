from linemarks.config import MarkDefaults, load_mark_defaults
from linemarks.domains import DomainAggregator, owner_key
from linemarks.errors import MarkDataError
from linemarks.events import ChangeEvent, Observable
from linemarks.fields import read_typed_field
from linemarks.labels import resolve_labels
from linemarks.model import FlexLineModel, LinesModel, MarkModel
from linemarks.scales import ColorScale, DateScale, LinearScale, OrdinalScale, Scale
from linemarks.series import Curve, CurvePoint, SegmentPoint, SegmentSeries

__all__ = [
    "ChangeEvent",
    "ColorScale",
    "Curve",
    "CurvePoint",
    "DateScale",
    "DomainAggregator",
    "FlexLineModel",
    "LinearScale",
    "LinesModel",
    "MarkDataError",
    "MarkDefaults",
    "MarkModel",
    "Observable",
    "OrdinalScale",
    "Scale",
    "SegmentPoint",
    "SegmentSeries",
    "load_mark_defaults",
    "owner_key",
    "read_typed_field",
    "resolve_labels",
]
