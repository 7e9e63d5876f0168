import pytest

from horusline.config import InputData, ModelInfo, SegmentId, Workspace
from horusline.model_segment import ModelSegment, format_model_name
from horusline.models import ContextModifier, ModelConfig, ModelEntry


def _input(model_id, display_name):
    return InputData(
        model=ModelInfo(id=model_id, display_name=display_name),
        workspace=Workspace(current_dir="/tmp/project"),
        transcript_path="/tmp/transcript.jsonl",
    )


@pytest.fixture
def segment():
    return ModelSegment(ModelConfig.default())


def test_recognised_model_uses_configured_name(segment):
    data = segment.collect(_input("glm-4.5", "Something Else"))
    assert data.primary == "GLM-4.5"
    assert data.secondary == ""


def test_metadata_carries_input(segment):
    data = segment.collect(_input("glm-4.5", "Upstream Name"))
    assert data.metadata == {"model_id": "glm-4.5", "display_name": "Upstream Name"}


def test_unknown_model_uses_upstream_name(segment):
    assert segment.collect(_input("gpt-x", "GPT X")).primary == "GPT X"


def test_unknown_model_with_empty_name_uses_id(segment):
    assert segment.collect(_input("gpt-x", "")).primary == "gpt-x"


def test_unknown_model_still_gets_modifier_suffix(segment):
    assert segment.collect(_input("gpt-x[1m]", "GPT X")).primary == "GPT X 1M"


def test_builtin_family_matches_config_lookup(segment):
    config = ModelConfig.default()
    data = segment.collect(_input("claude-opus-4-6[1m]", "Opus"))
    assert data.primary == config.get_display_name("claude-opus-4-6[1m]")
    assert data.primary.endswith(" 1M")


def test_segment_id():
    assert ModelSegment(ModelConfig()).segment_id is SegmentId.MODEL


def test_format_model_name_with_custom_config():
    config = ModelConfig(
        model_entries=[ModelEntry("foo", "Foo Model", 10)],
        context_modifiers=[ContextModifier("[x]", " X", 20)],
    )
    assert format_model_name(config, "foo-1[x]", "ignored") == "Foo Model X"
    assert format_model_name(config, "bar", "Bar") == "Bar"
    assert format_model_name(config, "bar[x]", "") == "bar[x] X"