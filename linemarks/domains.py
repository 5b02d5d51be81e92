from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import logging
from typing import Any, Protocol


LOGGER = logging.getLogger(__name__)

DIMENSIONS: tuple[str, ...] = ("x", "y", "color", "width")


class DomainScale(Protocol):
    def compute_and_set_domain(self, value_sets: Any, owner_key: str) -> None:
        ...

    def del_domain(self, domain: Any, owner_key: str) -> None:
        ...


def owner_key(model_id: str, dimension: str) -> str:
    return f"{model_id}_{dimension}"


class DomainAggregator:
    """Publishes one mark's per-dimension values to the scales it shares with other marks."""

    def __init__(self, model_id: str) -> None:
        self.model_id = model_id

    def publish(self, scale: DomainScale, dimension: str, value_sets: Any) -> None:
        key = owner_key(self.model_id, dimension)
        LOGGER.debug("publishing %s domain as %s", dimension, key)
        scale.compute_and_set_domain(value_sets, key)

    def retract(self, scale: DomainScale, dimension: str) -> None:
        key = owner_key(self.model_id, dimension)
        LOGGER.debug("retracting %s domain %s", dimension, key)
        scale.del_domain([], key)

    def aggregate(
        self,
        scales: Mapping[str, DomainScale | None],
        value_sets: Mapping[str, Any] | None,
        is_preserved: Callable[[str], bool],
        dimensions: Iterable[str],
    ) -> None:
        """Publish or retract each dimension; a mark without geometry does nothing.

        A dimension whose scale is absent is skipped. A preserved dimension, or one
        with no values at all, is retracted so no stale extent survives. Preserve
        flags are read per dimension, so a flag flipped by a scale observer while
        earlier dimensions publish is honored.
        """
        if value_sets is None:
            return
        for dimension in dimensions:
            scale = scales.get(dimension)
            if scale is None:
                continue
            if is_preserved(dimension):
                self.retract(scale, dimension)
                continue
            values = value_sets.get(dimension)
            if values is None or len(values) == 0:
                self.retract(scale, dimension)
                continue
            self.publish(scale, dimension, values)
