"""Segment showing how much of the model's context window is in use."""

from __future__ import annotations

import math
import os
from decimal import Decimal
from pathlib import Path

from horusline.config import InputData, SegmentId
from horusline.models import ModelConfig
from horusline.segment import SegmentData
from horusline.tokens import TranscriptEntry

COMPACT_ICON = "󰮯"


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _read_lines(path: str | Path) -> list[str] | None:
    """All lines of a file; None if it cannot be opened, [] if it is not UTF-8."""
    try:
        raw = Path(path).read_bytes()
    except OSError:
        return None
    try:
        return _split_lines(raw.decode("utf-8"))
    except UnicodeDecodeError:
        return []


def _entries(lines: list[str]):
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        entry = TranscriptEntry.parse_line(stripped)
        if entry is not None:
            yield entry


def _usage_tokens(entry: TranscriptEntry) -> int | None:
    if entry.usage is None:
        return None
    return entry.usage.normalize().display_tokens()


def _parent_dir(path: str | Path) -> str | None:
    parent = os.path.dirname(os.fspath(path))
    return parent or None


def _jsonl_files(directory: str) -> list[Path] | None:
    try:
        return sorted(p for p in Path(directory).iterdir() if p.suffix == ".jsonl")
    except OSError:
        return None


def count_compacts(transcript_path: str | Path) -> int:
    """Number of ``summary`` entries in the transcript, one per compaction."""
    try:
        raw = Path(transcript_path).read_bytes()
    except OSError:
        return 0
    count = 0
    for raw_line in raw.split(b"\n"):
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError:
            continue
        stripped = line.strip()
        if not stripped:
            continue
        entry = TranscriptEntry.parse_line(stripped)
        if entry is not None and entry.type == "summary":
            count += 1
    return count


def _find_assistant_by_uuid(lines: list[str], target_uuid: str) -> int | None:
    for entry in _entries(lines):
        if entry.uuid == target_uuid and entry.type == "assistant":
            tokens = _usage_tokens(entry)
            if tokens is not None:
                return tokens
    return None


def _search_uuid_in_file(path: Path, target_uuid: str) -> int | None:
    lines = _read_lines(path)
    if lines is None:
        return None
    for entry in _entries(lines):
        if entry.uuid != target_uuid:
            continue
        if entry.type == "assistant":
            return _usage_tokens(entry)
        if entry.type == "user" and entry.parent_uuid is not None:
            return _find_assistant_by_uuid(lines, entry.parent_uuid)
        return None
    return None


def _find_usage_by_leaf_uuid(leaf_uuid: str, project_dir: str) -> int | None:
    files = _jsonl_files(project_dir)
    if files is None:
        return None
    for path in files:
        tokens = _search_uuid_in_file(path, leaf_uuid)
        if tokens is not None:
            return tokens
    return None


def _parse_transcript_file(path: str | Path) -> int | None:
    lines = _read_lines(path)
    if not lines:
        return None

    last = TranscriptEntry.parse_line(lines[-1].strip())
    if last is not None and last.type == "summary" and last.leaf_uuid is not None:
        project_dir = _parent_dir(path)
        if project_dir is None:
            return None
        return _find_usage_by_leaf_uuid(last.leaf_uuid, project_dir)

    for entry in _entries(reversed(lines)):
        if entry.type == "assistant":
            tokens = _usage_tokens(entry)
            if tokens is not None:
                return tokens
    return None


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


def _usage_from_project_history(transcript_path: str | Path) -> int | None:
    project_dir = _parent_dir(transcript_path)
    if project_dir is None:
        return None
    files = _jsonl_files(project_dir)
    if not files:
        return None
    for path in sorted(files, key=_mtime, reverse=True):
        tokens = _parse_transcript_file(path)
        if tokens is not None:
            return tokens
    return None


def parse_transcript_usage(transcript_path: str | Path) -> int | None:
    """Context tokens of the latest assistant turn, searching history when needed."""
    tokens = _parse_transcript_file(transcript_path)
    if tokens is not None:
        return tokens
    if not Path(transcript_path).exists():
        return _usage_from_project_history(transcript_path)
    return None


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _fixed(value: float, digits: int) -> str:
    if not math.isfinite(value):
        return _float_text(value)
    return f"{value:.{digits}f}"


def _rate(tokens: int, limit: int) -> float:
    if limit == 0:
        return math.inf if tokens > 0 else math.nan
    return tokens / limit * 100.0


class ContextWindowSegment:
    segment_id = SegmentId.CONTEXT_WINDOW

    def __init__(self, model_config: ModelConfig | None = None) -> None:
        self.model_config = model_config if model_config is not None else ModelConfig.load()

    def collect(self, input_data: InputData) -> SegmentData:
        model_id = input_data.model.id
        limit = self.model_config.get_context_limit(model_id)
        tokens = parse_transcript_usage(input_data.transcript_path)

        if tokens is None:
            percentage, token_text = "-", "-"
            metadata = {"tokens": "-", "percentage": "-"}
        else:
            rate = _rate(tokens, limit)
            digits = 0 if math.isfinite(rate) and rate.is_integer() else 1
            percentage = f"{_fixed(rate, digits)}%"
            if tokens >= 1000:
                thousands = tokens / 1000
                token_text = (
                    f"{int(thousands)}k" if thousands.is_integer() else f"{thousands:.1f}k"
                )
            else:
                token_text = str(tokens)
            metadata = {"tokens": str(tokens), "percentage": _float_text(rate)}

        metadata["limit"] = str(limit)
        metadata["model"] = model_id

        compacts = count_compacts(input_data.transcript_path)
        secondary = ""
        if compacts > 0:
            metadata["compacts"] = str(compacts)
            secondary = f"{COMPACT_ICON}{compacts}"

        return SegmentData(
            primary=f"{percentage} · {token_text} tokens",
            secondary=secondary,
            metadata=metadata,
        )