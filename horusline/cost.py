"""Segment showing the session's total cost in US dollars."""

from __future__ import annotations

import math
from decimal import Decimal

from horusline.config import InputData, SegmentId
from horusline.segment import SegmentData


def _display_float(value: float) -> str:
    """Shortest plain-notation form of a float, without a trailing ``.0``."""
    if not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("inf" if value > 0 else "-inf")
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


class CostSegment:
    segment_id = SegmentId.COST

    def collect(self, input_data: InputData) -> SegmentData | None:
        cost_info = input_data.cost
        if cost_info is None or cost_info.total_cost_usd is None:
            return None
        cost = cost_info.total_cost_usd
        primary = "$0" if cost == 0.0 or cost < 0.01 else f"${cost:.2f}"
        return SegmentData(primary=primary, metadata={"cost": _display_float(cost)})