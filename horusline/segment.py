"""Data produced by a statusline segment, and helpers shared by segments."""

from __future__ import annotations

from dataclasses import dataclass, field

from horusline.config import Config, SegmentId

FILLED_CELL = "▰"
EMPTY_CELL = "▱"


@dataclass
class SegmentData:
    primary: str
    secondary: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


def render_progress_bar(percent: int, cells: int) -> str:
    """A bar ``cells`` wide filled to ``percent`` (clamped to 0..100)."""
    if cells <= 0:
        return ""
    clamped = min(max(percent, 0), 100)
    filled = min((clamped * cells + 50) // 100, cells)
    return FILLED_CELL * filled + EMPTY_CELL * (cells - filled)


def read_bar_cells(config: Config, segment_id: SegmentId) -> int:
    """The ``bar_cells`` option of a segment; 0 (no bar) when absent or invalid."""
    segment = config.find_segment(segment_id)
    if segment is None:
        return 0
    value = segment.options.get("bar_cells")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value