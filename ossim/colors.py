from __future__ import annotations

from typing import Dict, Iterable

# Rich colour names; order fixes the identity of the n-th input process.
PALETTE = (
    "cyan",
    "dark_orange",
    "purple",
    "green",
    "blue",
    "red",
    "hot_pink",
    "yellow",
)

IDLE_COLOR = "grey30"


def color_of(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def color_map(pids: Iterable[str]) -> Dict[str, str]:
    """
    Map each id to the colour of its position in the original input list.
    """
    return {pid: color_of(idx) for idx, pid in enumerate(pids)}
