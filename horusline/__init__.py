"""Statusline segments, model naming and ANSI rendering for Claude Code."""

__version__ = "1.1.2"