"""Statusline configuration and the input document supplied by the host."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import tomli_w


class ConfigError(ValueError):
    """Raised when a configuration or input document is missing or invalid."""


class StyleMode(Enum):
    PLAIN = "plain"
    NERD_FONT = "nerd_font"
    POWERLINE = "powerline"


class SegmentId(Enum):
    MODEL = "model"
    DIRECTORY = "directory"
    GIT = "git"
    CONTEXT_WINDOW = "context_window"
    USAGE = "usage"
    HOURLY_USAGE = "hourly_usage"
    WEEKLY_USAGE = "weekly_usage"
    CODEX_USAGE = "codex_usage"
    COST = "cost"
    SESSION = "session"
    OUTPUT_STYLE = "output_style"
    UPDATE = "update"


@dataclass(frozen=True)
class Color16:
    c16: int


@dataclass(frozen=True)
class Color256:
    c256: int


@dataclass(frozen=True)
class Rgb:
    r: int
    g: int
    b: int


AnsiColor = Color16 | Color256 | Rgb


def _is_u8(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def parse_color(data: Any) -> AnsiColor:
    """Build a color from ``{"c16": n}``, ``{"c256": n}`` or ``{"r", "g", "b"}``."""
    if isinstance(data, dict):
        if _is_u8(data.get("c16")):
            return Color16(data["c16"])
        if _is_u8(data.get("c256")):
            return Color256(data["c256"])
        if all(_is_u8(data.get(key)) for key in ("r", "g", "b")):
            return Rgb(data["r"], data["g"], data["b"])
    raise ConfigError(f"invalid color: {data!r}")


def color_to_dict(color: AnsiColor) -> dict[str, int]:
    match color:
        case Color16(c16=c16):
            return {"c16": c16}
        case Color256(c256=c256):
            return {"c256": c256}
        case Rgb(r=r, g=g, b=b):
            return {"r": r, "g": g, "b": b}
    raise ConfigError(f"not a color: {color!r}")


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a table")
    if key not in data or data[key] is None:
        raise ConfigError(f"missing field '{key}' in {where}")
    return data[key]


def _require_type(data: Any, key: str, where: str, kind: type | tuple[type, ...]) -> Any:
    value = _require(data, key, where)
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ConfigError(f"field '{key}' in {where} has the wrong type: {value!r}")
    return value


@dataclass
class IconConfig:
    plain: str
    nerd_font: str


@dataclass
class ColorConfig:
    icon: AnsiColor | None = None
    text: AnsiColor | None = None
    background: AnsiColor | None = None


@dataclass
class TextStyleConfig:
    text_bold: bool = False


@dataclass
class SegmentConfig:
    id: SegmentId
    enabled: bool
    icon: IconConfig
    colors: ColorConfig = field(default_factory=ColorConfig)
    styles: TextStyleConfig = field(default_factory=TextStyleConfig)
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> SegmentConfig:
        raw_id = _require(data, "id", "segment")
        try:
            segment_id = SegmentId(raw_id)
        except ValueError as exc:
            raise ConfigError(f"unknown segment id: {raw_id!r}") from exc

        icon = _require_type(data, "icon", "segment", dict)
        colors = _require_type(data, "colors", "segment", dict)
        styles = _require_type(data, "styles", "segment", dict)
        return cls(
            id=segment_id,
            enabled=_require_type(data, "enabled", "segment", bool),
            icon=IconConfig(
                plain=_require_type(icon, "plain", "icon", str),
                nerd_font=_require_type(icon, "nerd_font", "icon", str),
            ),
            colors=ColorConfig(
                **{
                    key: None if colors.get(key) is None else parse_color(colors[key])
                    for key in ("icon", "text", "background")
                }
            ),
            styles=TextStyleConfig(
                text_bold=_require_type(styles, "text_bold", "styles", bool)
            ),
            options=dict(_require_type(data, "options", "segment", dict)),
        )

    def to_dict(self) -> dict[str, Any]:
        colors = {
            key: color_to_dict(value)
            for key, value in (
                ("icon", self.colors.icon),
                ("text", self.colors.text),
                ("background", self.colors.background),
            )
            if value is not None
        }
        return {
            "id": self.id.value,
            "enabled": self.enabled,
            "icon": {"plain": self.icon.plain, "nerd_font": self.icon.nerd_font},
            "colors": colors,
            "styles": {"text_bold": self.styles.text_bold},
            "options": dict(self.options),
        }


@dataclass
class StyleConfig:
    mode: StyleMode
    separator: str


def _home_dir() -> Path | None:
    try:
        return Path.home()
    except RuntimeError:
        return None


def _horus_dir(home: Path | str | None) -> Path:
    base = Path(home) if home is not None else _home_dir()
    if base is None:
        return Path(".claude") / "horus"
    return base / ".claude" / "horus"


def default_config_path(home: Path | str | None = None) -> Path:
    """Location of ``config.toml`` under the given (or current user's) home."""
    return _horus_dir(home) / "config.toml"


def themes_path(home: Path | str | None = None) -> Path:
    """Location of the themes directory under the given (or current user's) home."""
    return _horus_dir(home) / "themes"


@dataclass
class Config:
    style: StyleConfig
    segments: list[SegmentConfig]
    theme: str

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        style = _require_type(data, "style", "config", dict)
        raw_mode = _require(style, "mode", "style")
        try:
            mode = StyleMode(raw_mode)
        except ValueError as exc:
            raise ConfigError(f"unknown style mode: {raw_mode!r}") from exc
        segments = _require_type(data, "segments", "config", list)
        return cls(
            style=StyleConfig(
                mode=mode, separator=_require_type(style, "separator", "style", str)
            ),
            segments=[SegmentConfig.from_dict(item) for item in segments],
            theme=_require_type(data, "theme", "config", str),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "style": {"mode": self.style.mode.value, "separator": self.style.separator},
            "segments": [segment.to_dict() for segment in self.segments],
            "theme": self.theme,
        }

    def to_toml(self) -> str:
        return tomli_w.dumps(self.to_dict())

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Read a configuration file; raise ConfigError if unreadable or invalid."""
        path = Path(path) if path is not None else default_config_path()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"cannot read {path}: {exc}") from exc
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
        return cls.from_dict(data)

    def save(self, path: Path | str | None = None) -> None:
        path = Path(path) if path is not None else default_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_toml(), encoding="utf-8")

    def check(self) -> None:
        """Validate the configuration, raising ConfigError on the first problem."""
        if not self.segments:
            raise ConfigError("No segments configured")
        seen: set[SegmentId] = set()
        for segment in self.segments:
            if segment.id in seen:
                raise ConfigError(f"Duplicate segment ID: {segment.id.value}")
            seen.add(segment.id)

    def matches(self, other: Config) -> bool:
        """True when style and segments equal those of ``other`` (theme name ignored)."""
        return self.style == other.style and self.segments == other.segments

    def find_segment(self, segment_id: SegmentId) -> SegmentConfig | None:
        return next((s for s in self.segments if s.id == segment_id), None)


@dataclass
class ModelInfo:
    id: str
    display_name: str


@dataclass
class Workspace:
    current_dir: str


@dataclass
class CostInfo:
    total_cost_usd: float | None = None
    total_duration_ms: int | None = None
    total_api_duration_ms: int | None = None
    total_lines_added: int | None = None
    total_lines_removed: int | None = None


@dataclass
class OutputStyleInfo:
    name: str


def _opt_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"field '{key}' must be a non-negative integer: {value!r}")
    return value


def _opt_float(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"field '{key}' must be a number: {value!r}")
    return float(value)


@dataclass
class InputData:
    model: ModelInfo
    workspace: Workspace
    transcript_path: str
    cost: CostInfo | None = None
    output_style: OutputStyleInfo | None = None

    @classmethod
    def from_dict(cls, data: Any) -> InputData:
        model = _require_type(data, "model", "input", dict)
        workspace = _require_type(data, "workspace", "input", dict)

        cost = None
        raw_cost = data.get("cost")
        if raw_cost is not None:
            if not isinstance(raw_cost, dict):
                raise ConfigError("field 'cost' must be an object")
            cost = CostInfo(
                total_cost_usd=_opt_float(raw_cost, "total_cost_usd"),
                total_duration_ms=_opt_int(raw_cost, "total_duration_ms"),
                total_api_duration_ms=_opt_int(raw_cost, "total_api_duration_ms"),
                total_lines_added=_opt_int(raw_cost, "total_lines_added"),
                total_lines_removed=_opt_int(raw_cost, "total_lines_removed"),
            )

        output_style = None
        raw_style = data.get("output_style")
        if raw_style is not None:
            output_style = OutputStyleInfo(
                name=_require_type(raw_style, "name", "output_style", str)
            )

        return cls(
            model=ModelInfo(
                id=_require_type(model, "id", "model", str),
                display_name=_require_type(model, "display_name", "model", str),
            ),
            workspace=Workspace(
                current_dir=_require_type(workspace, "current_dir", "workspace", str)
            ),
            transcript_path=_require_type(data, "transcript_path", "input", str),
            cost=cost,
            output_style=output_style,
        )