"""Segment showing the active output style."""

from __future__ import annotations

from horusline.config import InputData, SegmentId
from horusline.segment import SegmentData


class OutputStyleSegment:
    segment_id = SegmentId.OUTPUT_STYLE

    def collect(self, input_data: InputData) -> SegmentData | None:
        style = input_data.output_style
        if style is None:
            return None
        return SegmentData(primary=style.name, metadata={"style_name": style.name})