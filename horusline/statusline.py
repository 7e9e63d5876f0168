"""Rendering collected segments into a single ANSI-coloured status line."""

from __future__ import annotations

import os

from horusline.config import (
    AnsiColor,
    Color16,
    Color256,
    Config,
    Rgb,
    SegmentConfig,
    SegmentId,
    StyleMode,
)
from horusline.segment import SegmentData

RESET = "\x1b[0m"
BACKGROUND_RESET = "\x1b[49m"
POWERLINE_ARROW = "\ue0b0"
DEFAULT_WIDTH = 9999

_PRIORITY = {
    SegmentId.MODEL: 0,
    SegmentId.HOURLY_USAGE: 1,
    SegmentId.WEEKLY_USAGE: 2,
    SegmentId.USAGE: 2,
    SegmentId.CONTEXT_WINDOW: 3,
    SegmentId.CODEX_USAGE: 4,
    SegmentId.DIRECTORY: 5,
    SegmentId.GIT: 6,
    SegmentId.COST: 7,
    SegmentId.SESSION: 8,
    SegmentId.OUTPUT_STYLE: 9,
    SegmentId.UPDATE: 10,
}

Pair = tuple[SegmentConfig, SegmentData]


def visible_width(text: str) -> int:
    """Number of characters left once ANSI escape sequences are removed."""
    count = 0
    in_escape = False
    after_escape = False
    for ch in text:
        if ch == "\x1b":
            in_escape = True
            after_escape = True
            continue
        if after_escape:
            after_escape = False
            if ch == "[":
                continue
        if in_escape:
            if ch.isalpha():
                in_escape = False
        else:
            count += 1
    return count


def segment_priority(segment_id: SegmentId) -> int:
    """Display priority; lower values are kept longer when space runs out."""
    return _PRIORITY[segment_id]


def terminal_width() -> int:
    """Width from ``HORUS_WIDTH`` if it is a positive integer, else effectively unlimited."""
    raw = os.environ.get("HORUS_WIDTH")
    if raw is not None:
        try:
            width = int(raw)
        except ValueError:
            return DEFAULT_WIDTH
        if width > 0:
            return width
    return DEFAULT_WIDTH


def _foreground_params(color: AnsiColor) -> list[str]:
    match color:
        case Color16(c16=c16):
            return [str(30 + c16 if c16 < 8 else 90 + (c16 - 8))]
        case Color256(c256=c256):
            return ["38", "5", str(c256)]
        case Rgb(r=r, g=g, b=b):
            return ["38", "2", str(r), str(g), str(b)]
    raise TypeError(f"not a color: {color!r}")


def _foreground(color: AnsiColor) -> str:
    return f"\x1b[{';'.join(_foreground_params(color))}m"


def _background(color: AnsiColor) -> str:
    match color:
        case Color16(c16=c16):
            return f"\x1b[{40 + c16 if c16 < 8 else 100 + (c16 - 8)}m"
        case Color256(c256=c256):
            return f"\x1b[48;5;{c256}m"
        case Rgb(r=r, g=g, b=b):
            return f"\x1b[48;2;{r};{g};{b}m"
    raise TypeError(f"not a color: {color!r}")


def _apply_color(text: str, color: AnsiColor | None) -> str:
    if color is None:
        return text
    return f"{_foreground(color)}{text}{RESET}"


def _apply_style(text: str, color: AnsiColor | None, bold: bool) -> str:
    codes = ["1"] if bold else []
    if color is not None:
        codes.extend(_foreground_params(color))
    if not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}{RESET}"


def _powerline_arrow(prev_bg: AnsiColor | None, curr_bg: AnsiColor | None) -> str:
    if prev_bg is not None and curr_bg is not None:
        return f"{_background(curr_bg)}{_foreground(prev_bg)}{POWERLINE_ARROW}{RESET}"
    if prev_bg is not None:
        return f"{_foreground(prev_bg)}{POWERLINE_ARROW}{RESET}"
    if curr_bg is not None:
        return f"{_background(curr_bg)}{POWERLINE_ARROW}{RESET}"
    return POWERLINE_ARROW


class StatusLineGenerator:
    """Turns (segment config, segment data) pairs into the final status line."""

    def __init__(self, config: Config, width: int | None = None) -> None:
        self.config = config
        self.width = width

    def generate(self, segments: list[Pair]) -> str:
        enabled = [(cfg, data) for cfg, data in segments if cfg.enabled]
        if not enabled:
            return ""

        width = self.width if self.width is not None else terminal_width()

        full = self._render_and_join(enabled)
        if visible_width(full) <= width:
            return full

        compact = [
            (cfg, SegmentData(data.primary, "", dict(data.metadata)))
            for cfg, data in enabled
        ]
        output = self._render_and_join(compact)
        if visible_width(output) <= width:
            return output

        remaining = sorted(compact, key=lambda pair: segment_priority(pair[0].id))
        while len(remaining) > 1:
            remaining.pop()
            output = self._render_and_join(remaining)
            if visible_width(output) <= width:
                return output
        return self._render_and_join(remaining)

    def render_segment(self, config: SegmentConfig, data: SegmentData) -> str:
        """Render one segment with its icon, colours and optional background."""
        icon = data.metadata.get("dynamic_icon")
        if icon is None:
            icon = self._icon(config)
        colors = config.colors
        bold = config.styles.text_bold

        if colors.background is not None:
            icon_part = (
                _apply_color(icon, colors.icon).replace(RESET, "")
                if colors.icon is not None
                else icon
            )
            text_part = _apply_style(data.primary, colors.text, bold).replace(RESET, "")
            content = f" {icon_part} {text_part} "
            if data.secondary:
                secondary = _apply_style(data.secondary, colors.text, bold)
                content += f"{secondary.replace(RESET, '')} "
            return f"{_background(colors.background)}{content}{BACKGROUND_RESET}"

        segment = f"{_apply_color(icon, colors.icon)} {_apply_style(data.primary, colors.text, bold)}"
        if data.secondary:
            segment += f" {_apply_style(data.secondary, colors.text, bold)}"
        return segment

    def _icon(self, config: SegmentConfig) -> str:
        if self.config.style.mode is StyleMode.PLAIN:
            return config.icon.plain
        return config.icon.nerd_font

    def _render_and_join(self, segments: list[Pair]) -> str:
        rendered = [
            (cfg, text)
            for cfg, text in ((cfg, self.render_segment(cfg, data)) for cfg, data in segments)
            if text
        ]
        if not rendered:
            return ""
        separator = self.config.style.separator
        if separator == POWERLINE_ARROW:
            return self._join_powerline(rendered)
        white = f"\x1b[37m{separator}{RESET}"
        return white.join(text for _, text in rendered)

    @staticmethod
    def _join_powerline(rendered: list[tuple[SegmentConfig, str]]) -> str:
        if len(rendered) == 1:
            return rendered[0][1]
        parts = [rendered[0][1]]
        for (prev_cfg, _), (curr_cfg, text) in zip(rendered, rendered[1:]):
            parts.append(_powerline_arrow(prev_cfg.colors.background, curr_cfg.colors.background))
            parts.append(text)
        parts.append(RESET)
        return "".join(parts)