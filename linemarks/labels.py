from __future__ import annotations

from collections.abc import Sequence


DEFAULT_LABEL_PREFIX = "C"


def default_label(index: int, *, prefix: str = DEFAULT_LABEL_PREFIX) -> str:
    return f"{prefix}{index + 1}"


def resolve_labels(labels: Sequence[str] | None, n: int, *, prefix: str = DEFAULT_LABEL_PREFIX) -> list[str]:
    """Return exactly `n` curve names.

    Extra labels are dropped; missing ones get 1-based defaults (`C1`, `C2`, ...).
    The caller's sequence is never modified.
    """
    if n < 0:
        raise ValueError("curve count must be >= 0")
    resolved = [str(label) for label in (labels or ())][:n]
    resolved.extend(default_label(i, prefix=prefix) for i in range(len(resolved), n))
    return resolved
