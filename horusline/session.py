"""Segment showing session duration, line changes and API wait ratio."""

from __future__ import annotations

import math

from horusline.config import InputData, SegmentId
from horusline.segment import SegmentData

API_ICON = "󰈀"


def format_duration(ms: int) -> str:
    """Compact human form: ``ms``, ``s``, ``m[s]`` or ``h[m]``."""
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms // 1000}s"
    if ms < 3_600_000:
        minutes, rest = divmod(ms, 60_000)
        seconds = rest // 1000
        return f"{minutes}m" if seconds == 0 else f"{minutes}m{seconds}s"
    hours, rest = divmod(ms, 3_600_000)
    minutes = rest // 60_000
    return f"{hours}h" if minutes == 0 else f"{hours}h{minutes}m"


def _line_changes(added: int | None, removed: int | None) -> str | None:
    plus = f"\x1b[32m+{added}\x1b[0m"
    minus = f"\x1b[31m-{removed}\x1b[0m"
    if added is not None and removed is not None:
        return f"{plus} {minus}" if added > 0 or removed > 0 else None
    if added is not None:
        return plus if added > 0 else None
    if removed is not None:
        return minus if removed > 0 else None
    return None


class SessionSegment:
    segment_id = SegmentId.SESSION

    def collect(self, input_data: InputData) -> SegmentData | None:
        cost = input_data.cost
        if cost is None or cost.total_duration_ms is None:
            return None

        metadata = {"duration_ms": str(cost.total_duration_ms)}
        if cost.total_api_duration_ms is not None:
            metadata["api_duration_ms"] = str(cost.total_api_duration_ms)
        if cost.total_lines_added is not None:
            metadata["lines_added"] = str(cost.total_lines_added)
        if cost.total_lines_removed is not None:
            metadata["lines_removed"] = str(cost.total_lines_removed)

        parts: list[str] = []
        changes = _line_changes(cost.total_lines_added, cost.total_lines_removed)
        if changes is not None:
            parts.append(changes)

        total_ms, api_ms = cost.total_duration_ms, cost.total_api_duration_ms
        if api_ms is not None and total_ms > 0 and api_ms > 0:
            ratio = min(math.floor(api_ms / total_ms * 100.0 + 0.5), 255)
            parts.append(f"{API_ICON}{ratio}%")
            metadata["api_ratio"] = str(ratio)

        return SegmentData(
            primary=format_duration(total_ms),
            secondary=" ".join(parts),
            metadata=metadata,
        )