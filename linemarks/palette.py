from __future__ import annotations


CATEGORY10: tuple[str, ...] = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)


def default_colors(palette: tuple[str, ...] = CATEGORY10) -> list[str]:
    """Fresh list per call; marks must never share a mutable palette."""
    return list(palette)
