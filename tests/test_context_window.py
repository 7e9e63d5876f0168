import json
import os

from horusline.config import InputData
from horusline.context_window import (
    COMPACT_ICON,
    ContextWindowSegment,
    count_compacts,
    parse_transcript_usage,
)
from horusline.models import ModelConfig
from horusline.tokens import RawUsage

SONNET = "claude-sonnet-4-20250514"


def write_jsonl(path, entries):
    path.write_text(
        "".join(
            (e if isinstance(e, str) else json.dumps(e)) + "\n" for e in entries
        ),
        encoding="utf-8",
    )
    return path


def assistant(usage, uuid=None):
    entry = {"type": "assistant", "message": {"usage": usage}}
    if uuid is not None:
        entry["uuid"] = uuid
    return entry


def expected_tokens(usage):
    return RawUsage.from_dict(usage).normalize().display_tokens()


def make_input(transcript, model_id=SONNET):
    return InputData.from_dict(
        {
            "model": {"id": model_id, "display_name": "Model"},
            "workspace": {"current_dir": "/work"},
            "transcript_path": str(transcript),
        }
    )


def test_count_compacts(tmp_path):
    path = write_jsonl(
        tmp_path / "s.jsonl",
        [
            {"type": "summary", "summary": "a"},
            {"type": "user"},
            "not json",
            "",
            {"type": "summary", "summary": "b"},
        ],
    )
    assert count_compacts(path) == 2


def test_count_compacts_missing_file(tmp_path):
    assert count_compacts(tmp_path / "missing.jsonl") == 0


def test_latest_assistant_usage(tmp_path):
    old = {"input_tokens": 10, "output_tokens": 5}
    new = {"input_tokens": 100, "output_tokens": 50, "cache_read_input_tokens": 25}
    path = write_jsonl(
        tmp_path / "s.jsonl",
        [
            assistant(old),
            assistant(new),
            {"type": "assistant", "message": {}},
            {"type": "user", "message": {"usage": {"input_tokens": 999}}},
            "garbage line",
        ],
    )
    assert parse_transcript_usage(path) == expected_tokens(new)


def test_no_assistant_usage(tmp_path):
    path = write_jsonl(tmp_path / "s.jsonl", [{"type": "user"}])
    assert parse_transcript_usage(path) is None


def test_empty_file(tmp_path):
    path = tmp_path / "s.jsonl"
    path.write_text("", encoding="utf-8")
    assert parse_transcript_usage(path) is None


def test_summary_follows_leaf_uuid_to_assistant(tmp_path):
    usage = {"input_tokens": 300, "output_tokens": 20}
    write_jsonl(tmp_path / "other.jsonl", [assistant(usage, uuid="leaf-1")])
    transcript = write_jsonl(
        tmp_path / "session.jsonl",
        [
            assistant({"input_tokens": 1}),
            {"type": "summary", "summary": "s", "leafUuid": "leaf-1"},
        ],
    )
    assert parse_transcript_usage(transcript) == expected_tokens(usage)


def test_summary_follows_user_parent(tmp_path):
    usage = {"input_tokens": 700}
    write_jsonl(
        tmp_path / "other.jsonl",
        [
            assistant(usage, uuid="parent-1"),
            {"type": "user", "uuid": "leaf-2", "parentUuid": "parent-1"},
        ],
    )
    transcript = write_jsonl(
        tmp_path / "session.jsonl",
        [{"type": "summary", "summary": "s", "leafUuid": "leaf-2"}],
    )
    assert parse_transcript_usage(transcript) == expected_tokens(usage)


def test_summary_with_unknown_leaf_gives_none(tmp_path):
    transcript = write_jsonl(
        tmp_path / "session.jsonl",
        [
            assistant({"input_tokens": 5000}),
            {"type": "summary", "summary": "s", "leafUuid": "nowhere"},
        ],
    )
    assert parse_transcript_usage(transcript) is None


def test_missing_transcript_uses_most_recent_session(tmp_path):
    old_usage = {"input_tokens": 111}
    new_usage = {"input_tokens": 222}
    old = write_jsonl(tmp_path / "a.jsonl", [assistant(old_usage)])
    new = write_jsonl(tmp_path / "b.jsonl", [assistant(new_usage)])
    os.utime(old, (1_000_000, 1_000_000))
    os.utime(new, (2_000_000, 2_000_000))
    assert parse_transcript_usage(tmp_path / "missing.jsonl") == expected_tokens(new_usage)

    os.utime(old, (3_000_000, 3_000_000))
    assert parse_transcript_usage(tmp_path / "missing.jsonl") == expected_tokens(old_usage)


def test_missing_transcript_and_directory(tmp_path):
    assert parse_transcript_usage(tmp_path / "nodir" / "missing.jsonl") is None


def test_segment_without_usage(tmp_path):
    segment = ContextWindowSegment(ModelConfig.default())
    data = segment.collect(make_input(tmp_path / "missing.jsonl"))
    assert data.primary == "- · - tokens"
    assert data.metadata["tokens"] == "-"
    assert data.metadata["percentage"] == "-"
    assert data.metadata["limit"] == "200000"
    assert data.metadata["model"] == SONNET
    assert data.secondary == ""


def test_segment_with_round_usage(tmp_path):
    transcript = write_jsonl(tmp_path / "s.jsonl", [assistant({"input_tokens": 100_000})])
    data = ContextWindowSegment(ModelConfig.default()).collect(make_input(transcript))
    assert data.primary == "50% · 100k tokens"
    assert data.metadata["tokens"] == "100000"
    assert data.metadata["percentage"] == "50"


def test_segment_fractional_thousands(tmp_path):
    transcript = write_jsonl(tmp_path / "s.jsonl", [assistant({"input_tokens": 1500})])
    data = ContextWindowSegment(ModelConfig.default()).collect(make_input(transcript))
    assert data.primary.endswith("1.5k tokens")


def test_segment_small_token_count(tmp_path):
    transcript = write_jsonl(tmp_path / "s.jsonl", [assistant({"input_tokens": 500})])
    data = ContextWindowSegment(ModelConfig.default()).collect(make_input(transcript))
    assert data.primary.endswith("· 500 tokens")
    assert data.metadata["tokens"] == "500"


def test_segment_uses_context_modifier_limit(tmp_path):
    transcript = write_jsonl(tmp_path / "s.jsonl", [assistant({"input_tokens": 100_000})])
    data = ContextWindowSegment(ModelConfig.default()).collect(
        make_input(transcript, model_id="claude-opus-4-6[1m]")
    )
    assert data.metadata["limit"] == "1000000"


def test_segment_reports_compacts(tmp_path):
    transcript = write_jsonl(
        tmp_path / "s.jsonl",
        [
            {"type": "summary", "summary": "one"},
            {"type": "summary", "summary": "two"},
            assistant({"input_tokens": 2000}),
        ],
    )
    data = ContextWindowSegment(ModelConfig.default()).collect(make_input(transcript))
    assert data.metadata["compacts"] == "2"
    assert data.secondary == f"{COMPACT_ICON}2"
    assert data.metadata["tokens"] == "2000"