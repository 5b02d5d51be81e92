from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from typing import Any, Callable

import numpy as np


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Fields touched by one `set()` batch, with their previous values."""

    changed: tuple[str, ...]
    previous: Mapping[str, Any]

    def __contains__(self, name: object) -> bool:
        return name in self.changed


ChangeHandler = Callable[[ChangeEvent], None]


class Observable:
    """Attribute store with per-field and batched change handlers.

    Within one batch every mutation is applied before any handler runs. Per-field
    handlers fire first, in assignment order, then each batched handler whose field
    set intersects the batch fires exactly once.
    """

    def __init__(self) -> None:
        self._attrs: dict[str, Any] = {}
        self._field_handlers: dict[str, list[ChangeHandler]] = {}
        self._batch_handlers: list[tuple[frozenset[str], ChangeHandler]] = []
        self._event_handlers: dict[str, list[Callable[..., None]]] = {}

    def get(self, name: str) -> Any:
        return self._attrs[name]

    def _commit(self, name: str, value: Any) -> None:
        self._attrs[name] = value

    def set(self, **changes: Any) -> ChangeEvent:
        return self.update(changes)

    def update(self, changes: Mapping[str, Any]) -> ChangeEvent:
        previous: dict[str, Any] = {}
        for name, value in changes.items():
            old = self._attrs.get(name)
            if name in self._attrs and _values_equal(old, value):
                continue
            previous[name] = old
            self._commit(name, value)
        event = ChangeEvent(changed=tuple(previous), previous=previous)
        if not event.changed:
            return event

        for name in event.changed:
            for handler in list(self._field_handlers.get(name, ())):
                handler(event)
        touched = set(event.changed)
        for names, handler in list(self._batch_handlers):
            if names & touched:
                handler(event)
        return event

    def on_change(self, names: str | Iterable[str], handler: ChangeHandler) -> None:
        if isinstance(names, str):
            self._field_handlers.setdefault(names, []).append(handler)
            return
        field_set = frozenset(names)
        if not field_set:
            raise ValueError("batched handler needs at least one field name")
        self._batch_handlers.append((field_set, handler))

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self._event_handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Callable[..., None]) -> None:
        handlers = self._event_handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def trigger(self, event: str, *args: Any) -> None:
        handlers = list(self._event_handlers.get(event, ()))
        LOGGER.debug("%s: trigger %s (%d handlers)", type(self).__name__, event, len(handlers))
        for handler in handlers:
            handler(*args)


def _values_equal(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        if not (isinstance(a, np.ndarray) and isinstance(b, np.ndarray)):
            return False
        return a.dtype == b.dtype and bool(np.array_equal(a, b))
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(_values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(_values_equal(a[k], b[k]) for k in a)
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False
