"""Token usage records from transcripts, normalised across provider formats."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

_U32_MAX = 0xFFFFFFFF

_SIMPLE_FIELDS = (
    "input_tokens",
    "prompt_tokens",
    "output_tokens",
    "completion_tokens",
    "total_tokens",
    "cache_creation_input_tokens",
    "cache_read_input_tokens",
    "cache_creation_prompt_tokens",
    "cache_read_prompt_tokens",
    "cached_tokens",
)
_KNOWN_FIELDS = frozenset(
    _SIMPLE_FIELDS + ("prompt_tokens_details", "completion_tokens_details")
)


def _opt_u32(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ValueError(f"{key} must be an unsigned 32-bit integer, got {value!r}")
    return value


def _opt_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


@dataclass
class NormalizedUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    calculation_source: str = ""
    raw_data_available: list[str] = field(default_factory=list)

    def context_tokens(self) -> int:
        """Tokens occupying the context window, including this turn's output."""
        return (
            self.input_tokens
            + self.cache_creation_input_tokens
            + self.cache_read_input_tokens
            + self.output_tokens
        )

    def total_for_cost(self) -> int:
        if self.total_tokens > 0:
            return self.total_tokens
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_input_tokens
            + self.cache_read_input_tokens
        )

    def display_tokens(self) -> int:
        context = self.context_tokens()
        if context > 0:
            return context
        if self.total_tokens > 0:
            return self.total_tokens
        return max(self.input_tokens, self.output_tokens)


@dataclass
class RawUsage:
    input_tokens: int | None = None
    prompt_tokens: int | None = None
    output_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None
    cache_creation_prompt_tokens: int | None = None
    cache_read_prompt_tokens: int | None = None
    cached_tokens: int | None = None
    prompt_tokens_details: dict[str, int | None] | None = None
    completion_tokens_details: dict[str, int] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> RawUsage:
        """Parse a usage object; raise ValueError on malformed fields."""
        if not isinstance(data, dict):
            raise ValueError(f"usage must be an object, got {data!r}")

        values: dict[str, Any] = {name: _opt_u32(data, name) for name in _SIMPLE_FIELDS}

        details = data.get("prompt_tokens_details")
        if details is not None:
            if not isinstance(details, dict):
                raise ValueError("prompt_tokens_details must be an object")
            values["prompt_tokens_details"] = {
                "cached_tokens": _opt_u32(details, "cached_tokens"),
                "audio_tokens": _opt_u32(details, "audio_tokens"),
            }

        completion = data.get("completion_tokens_details")
        if completion is not None:
            if not isinstance(completion, dict):
                raise ValueError("completion_tokens_details must be an object")
            checked = {key: _opt_u32(completion, key) for key in completion}
            if any(value is None for value in checked.values()):
                raise ValueError("completion_tokens_details values must be integers")
            values["completion_tokens_details"] = checked

        extra = {key: value for key, value in data.items() if key not in _KNOWN_FIELDS}
        return cls(**values, extra=extra)

    def normalize(self) -> NormalizedUsage:
        """Merge provider-specific fields, preferring Anthropic names over OpenAI ones."""
        available: list[str] = []

        def first(*candidates: int | None) -> int:
            return next((c for c in candidates if c is not None), 0)

        nested_cached = (
            self.prompt_tokens_details.get("cached_tokens")
            if self.prompt_tokens_details
            else None
        )

        input_tokens = first(self.input_tokens, self.prompt_tokens)
        output_tokens = first(self.output_tokens, self.completion_tokens)
        total = first(self.total_tokens)
        cache_creation = first(
            self.cache_creation_input_tokens, self.cache_creation_prompt_tokens
        )
        cache_read = first(
            self.cache_read_input_tokens,
            self.cache_read_prompt_tokens,
            self.cached_tokens,
            nested_cached,
        )

        for name, value in (
            ("input_tokens", input_tokens),
            ("output_tokens", output_tokens),
            ("total_tokens", total),
            ("cache_creation", cache_creation),
            ("cache_read", cache_read),
        ):
            if value > 0:
                available.append(name)

        sources: list[str] = []
        if total > 0:
            sources.append("total_tokens_direct")
            total_value = total
        elif input_tokens or output_tokens or cache_read or cache_creation:
            sources.append("total_from_components")
            total_value = input_tokens + output_tokens + cache_read + cache_creation
        else:
            total_value = 0

        return NormalizedUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_value,
            cache_creation_input_tokens=cache_creation,
            cache_read_input_tokens=cache_read,
            calculation_source="+".join(sources),
            raw_data_available=available,
        )


@dataclass
class TranscriptEntry:
    type: str | None = None
    usage: RawUsage | None = None
    leaf_uuid: str | None = None
    uuid: str | None = None
    parent_uuid: str | None = None
    summary: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TranscriptEntry:
        """Parse one transcript record; raise ValueError on malformed fields."""
        if not isinstance(data, dict):
            raise ValueError(f"transcript entry must be an object, got {data!r}")

        usage = None
        message = data.get("message")
        if message is not None:
            if not isinstance(message, dict):
                raise ValueError("message must be an object")
            if message.get("usage") is not None:
                usage = RawUsage.from_dict(message["usage"])

        return cls(
            type=_opt_str(data, "type"),
            usage=usage,
            leaf_uuid=_opt_str(data, "leafUuid"),
            uuid=_opt_str(data, "uuid"),
            parent_uuid=_opt_str(data, "parentUuid"),
            summary=_opt_str(data, "summary"),
        )

    @classmethod
    def parse_line(cls, line: str) -> TranscriptEntry | None:
        """Parse one JSONL line, returning None if it is not a valid entry."""
        try:
            return cls.from_dict(json.loads(line))
        except ValueError:
            return None