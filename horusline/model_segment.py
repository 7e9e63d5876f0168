"""Segment showing the active model's display name."""

from __future__ import annotations

from horusline.config import InputData, SegmentId
from horusline.models import ModelConfig
from horusline.segment import SegmentData


def format_model_name(model_config: ModelConfig, model_id: str, display_name: str) -> str:
    """Configured name if recognised, else the host's name (or the ID) plus any suffix."""
    configured = model_config.get_display_name(model_id)
    if configured is not None:
        return configured
    base = display_name or model_id
    suffix = model_config.get_display_suffix(model_id)
    return base + suffix if suffix is not None else base


class ModelSegment:
    segment_id = SegmentId.MODEL

    def __init__(self, model_config: ModelConfig | None = None) -> None:
        self.model_config = model_config if model_config is not None else ModelConfig.load()

    def collect(self, input_data: InputData) -> SegmentData:
        model = input_data.model
        return SegmentData(
            primary=format_model_name(self.model_config, model.id, model.display_name),
            metadata={"model_id": model.id, "display_name": model.display_name},
        )