"""Model display names and context-window limits, matched from model IDs."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from horusline.config import ConfigError

DEFAULT_CONTEXT_LIMIT = 200_000
_U32_MAX = 0xFFFFFFFF

_FAMILY_TEMPLATE = (
    r"(?:(?P<pre_major>\d{{1,2}})(?:-(?P<pre_minor>\d{{1,2}}))?-{kw}"
    r"|{kw}-(?P<post_major>\d{{1,2}})(?:-(?P<post_minor>\d{{1,2}}))?)"
    r"(?:-\d{{3,}}|-[a-z]|\[|\Z)"
)

_TEMPLATE = """\
# Horus Model Configuration
# This file defines model display names and context limits for different LLM models
# File location: ~/.claude/horus/models.toml
#
# Claude models are automatically recognized (Sonnet, Opus, Haiku) with
# version extraction. You only need to add entries here for overrides or
# third-party models.

# Model configurations (simple substring matching)
# Each [[models]] section defines a model pattern and its properties
# These take priority over built-in Claude model recognition

# Example:
# [[models]]
# pattern = "my-model"
# display_name = "My Model"
# context_limit = 128000

# Context modifiers override context limits and append suffix to display names
# They are matched independently, enabling composition:
#   model "Opus 4" + modifier " 1M" = "Opus 4 1M"

# Example:
# [[context_modifiers]]
# pattern = "[1m]"
# display_suffix = " 1M"
# context_limit = 1000000
"""


@dataclass(frozen=True)
class _ModelFamily:
    """A built-in model family whose version is read from the model ID."""

    regex: re.Pattern[str]
    display_prefix: str
    context_limit: int

    @classmethod
    def build(cls, keyword: str, display_prefix: str, context_limit: int) -> _ModelFamily:
        pattern = _FAMILY_TEMPLATE.format(kw=re.escape(keyword))
        return cls(re.compile(pattern), display_prefix, context_limit)

    def match(self, model_id_lower: str) -> str | None:
        found = self.regex.search(model_id_lower)
        if found is None:
            return None
        major = found.group("post_major") or found.group("pre_major")
        if major is None:
            return None
        minor = found.group("post_minor") or found.group("pre_minor")
        version = f"{major}.{minor}" if minor is not None else major
        return f"{self.display_prefix} {version}"


_BUILTIN_FAMILIES = (
    _ModelFamily.build("sonnet", "Sonnet", 200_000),
    _ModelFamily.build("opus", "Opus", 200_000),
    _ModelFamily.build("haiku", "Haiku", 200_000),
)


def _match_builtin_family(model_id: str) -> tuple[str, int] | None:
    lowered = model_id.lower()
    for family in _BUILTIN_FAMILIES:
        name = family.match(lowered)
        if name is not None:
            return name, family.context_limit
    return None


def _str_field(data: Any, key: str, where: str) -> str:
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a table")
    value = data.get(key)
    if not isinstance(value, str):
        raise ConfigError(f"field '{key}' in {where} must be a string: {value!r}")
    return value


def _limit_field(data: dict[str, Any], where: str) -> int:
    value = data.get("context_limit")
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ConfigError(f"field 'context_limit' in {where} is invalid: {value!r}")
    return value


@dataclass
class ModelEntry:
    pattern: str
    display_name: str
    context_limit: int


@dataclass
class ContextModifier:
    """Overrides the context limit and appends a suffix, e.g. ``[1m]`` for 1M context."""

    pattern: str
    display_suffix: str
    context_limit: int


def _home_dir() -> Path | None:
    try:
        return Path.home()
    except RuntimeError:
        return None


@dataclass
class ModelConfig:
    model_entries: list[ModelEntry] = field(default_factory=list)
    context_modifiers: list[ContextModifier] = field(default_factory=list)

    @classmethod
    def default(cls) -> ModelConfig:
        """Built-in entries for third-party models plus the ``[1m]`` modifier."""
        return cls(
            model_entries=[
                ModelEntry("glm-4.5", "GLM-4.5", 128_000),
                ModelEntry("kimi-k2-turbo", "Kimi K2 Turbo", 128_000),
                ModelEntry("kimi-k2", "Kimi K2", 128_000),
                ModelEntry("qwen3-coder", "Qwen Coder", 256_000),
            ],
            context_modifiers=[ContextModifier("[1m]", " 1M", 1_000_000)],
        )

    @classmethod
    def from_dict(cls, data: Any) -> ModelConfig:
        if not isinstance(data, dict):
            raise ConfigError("model configuration must be a table")
        models = data.get("models", [])
        modifiers = data.get("context_modifiers", [])
        if not isinstance(models, list) or not isinstance(modifiers, list):
            raise ConfigError("'models' and 'context_modifiers' must be arrays")
        return cls(
            model_entries=[
                ModelEntry(
                    pattern=_str_field(item, "pattern", "models"),
                    display_name=_str_field(item, "display_name", "models"),
                    context_limit=_limit_field(item, "models"),
                )
                for item in models
            ],
            context_modifiers=[
                ContextModifier(
                    pattern=_str_field(item, "pattern", "context_modifiers"),
                    display_suffix=_str_field(item, "display_suffix", "context_modifiers"),
                    context_limit=_limit_field(item, "context_modifiers"),
                )
                for item in modifiers
            ],
        )

    @classmethod
    def load_from_file(cls, path: Path | str) -> ModelConfig:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"cannot read {path}: {exc}") from exc
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def load(cls, home: Path | str | None = None, cwd: Path | str | None = None) -> ModelConfig:
        """Defaults, with entries from the user's or the local ``models.toml`` in front."""
        config = cls.default()
        home_path = Path(home) if home is not None else _home_dir()

        candidates: list[Path] = []
        if home_path is not None:
            user_path = home_path / ".claude" / "horus" / "models.toml"
            if not user_path.exists():
                try:
                    create_default_file(user_path)
                except OSError:
                    pass
            candidates.append(user_path)
        candidates.append((Path(cwd) if cwd is not None else Path()) / "models.toml")

        for path in candidates:
            if not path.exists():
                continue
            try:
                loaded = cls.load_from_file(path)
            except ConfigError:
                continue
            config.model_entries = loaded.model_entries + config.model_entries
            config.context_modifiers = loaded.context_modifiers + config.context_modifiers
            return config
        return config

    def _resolve(self, model_id: str) -> tuple[str | None, int, str | None]:
        lowered = model_id.lower()

        entry = next(
            (e for e in self.model_entries if e.pattern.lower() in lowered), None
        )
        if entry is not None:
            base_name: str | None = entry.display_name
            base_limit: int | None = entry.context_limit
        else:
            family = _match_builtin_family(model_id)
            base_name, base_limit = family if family is not None else (None, None)

        modifier = next(
            (m for m in self.context_modifiers if m.pattern.lower() in lowered), None
        )

        if base_name is None:
            display_name = None
        elif modifier is not None:
            display_name = base_name + modifier.display_suffix
        else:
            display_name = base_name

        if modifier is not None:
            limit = modifier.context_limit
        elif base_limit is not None:
            limit = base_limit
        else:
            limit = DEFAULT_CONTEXT_LIMIT

        suffix = modifier.display_suffix if modifier is not None else None
        return display_name, limit, suffix

    def get_context_limit(self, model_id: str) -> int:
        return self._resolve(model_id)[1]

    def try_get_context_limit(self, model_id: str) -> int | None:
        """The context limit, or None when no entry, family or modifier matched."""
        name, limit, suffix = self._resolve(model_id)
        return limit if name is not None or suffix is not None else None

    def get_display_name(self, model_id: str) -> str | None:
        return self._resolve(model_id)[0]

    def get_display_suffix(self, model_id: str) -> str | None:
        return self._resolve(model_id)[2]


def create_default_file(path: Path | str) -> None:
    """Write the commented ``models.toml`` template, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_TEMPLATE, encoding="utf-8")