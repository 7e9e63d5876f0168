import pytest

from horusline.config import CostInfo, InputData, ModelInfo, Workspace
from horusline.cost import CostSegment


def _input(cost):
    return InputData(
        model=ModelInfo("model-id", "Model"),
        workspace=Workspace("/tmp/project"),
        transcript_path="transcript.jsonl",
        cost=cost,
    )


def test_no_cost_block():
    assert CostSegment().collect(_input(None)) is None


def test_no_total_cost():
    assert CostSegment().collect(_input(CostInfo(total_duration_ms=10))) is None


@pytest.mark.parametrize("amount", [0.0, 0.005, 0.0099])
def test_tiny_cost_shows_zero(amount):
    data = CostSegment().collect(_input(CostInfo(total_cost_usd=amount)))
    assert data.primary == "$0"


def test_cost_rounded_to_cents():
    data = CostSegment().collect(_input(CostInfo(total_cost_usd=1.234)))
    assert data.primary == "$1.23"
    assert data.secondary == ""


def test_metadata_keeps_raw_value():
    data = CostSegment().collect(_input(CostInfo(total_cost_usd=1.5)))
    assert data.metadata == {"cost": "1.5"}


def test_metadata_integral_value_has_no_fraction():
    data = CostSegment().collect(_input(CostInfo(total_cost_usd=2.0)))
    assert data.metadata["cost"] == "2"