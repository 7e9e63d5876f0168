"""Segment showing the git branch, working-tree state and upstream divergence."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from horusline.config import InputData, SegmentId
from horusline.segment import SegmentData

_COUNT_RE = re.compile(r"\+?[0-9]+")
_U32_MAX = 0xFFFFFFFF
_CONFLICT_MARKERS = ("UU", "AA", "DD")


class GitStatus(Enum):
    CLEAN = "Clean"
    DIRTY = "Dirty"
    CONFLICTS = "Conflicts"


_STATUS_SYMBOLS = {
    GitStatus.CLEAN: "✓",
    GitStatus.DIRTY: "●",
    GitStatus.CONFLICTS: "⚠",
}


@dataclass
class GitInfo:
    branch: str
    status: GitStatus
    ahead: int
    behind: int
    sha: str | None = None


def _git(working_dir: str | Path, *args: str) -> bytes | None:
    """Run a git command; its stdout on success, None on failure."""
    try:
        result = subprocess.run(
            ["git", "--no-optional-locks", *args],
            cwd=working_dir,
            capture_output=True,
            check=False,
        )
    except OSError:
        return None
    return result.stdout if result.returncode == 0 else None


def _decode(raw: bytes) -> str | None:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _is_repository(working_dir: str | Path) -> bool:
    return _git(working_dir, "rev-parse", "--git-dir") is not None


def _branch(working_dir: str | Path) -> str | None:
    for args in (("branch", "--show-current"), ("symbolic-ref", "--short", "HEAD")):
        raw = _git(working_dir, *args)
        if raw is None:
            continue
        text = _decode(raw)
        if text is None:
            return None
        name = text.strip()
        if name:
            return name
    return None


def _status(working_dir: str | Path) -> GitStatus:
    raw = _git(working_dir, "status", "--porcelain")
    if raw is None:
        return GitStatus.CLEAN
    text = _decode(raw) or ""
    if not text.strip():
        return GitStatus.CLEAN
    if any(marker in text for marker in _CONFLICT_MARKERS):
        return GitStatus.CONFLICTS
    return GitStatus.DIRTY


def _commit_count(working_dir: str | Path, revision_range: str) -> int:
    raw = _git(working_dir, "rev-list", "--count", revision_range)
    if raw is None:
        return 0
    text = (_decode(raw) or "").strip()
    if not _COUNT_RE.fullmatch(text):
        return 0
    value = int(text)
    return value if value <= _U32_MAX else 0


def _sha(working_dir: str | Path) -> str | None:
    raw = _git(working_dir, "rev-parse", "--short=7", "HEAD")
    if raw is None:
        return None
    text = _decode(raw)
    if text is None:
        return None
    return text.strip() or None


def read_git_info(working_dir: str | Path, show_sha: bool = False) -> GitInfo | None:
    """Repository state for ``working_dir``, or None if it is not inside a repository."""
    if not _is_repository(working_dir):
        return None
    return GitInfo(
        branch=_branch(working_dir) or "detached",
        status=_status(working_dir),
        ahead=_commit_count(working_dir, "@{u}..HEAD"),
        behind=_commit_count(working_dir, "HEAD..@{u}"),
        sha=_sha(working_dir) if show_sha else None,
    )


class GitSegment:
    segment_id = SegmentId.GIT

    def __init__(self, show_sha: bool = False) -> None:
        self.show_sha = show_sha

    def collect(self, input_data: InputData) -> SegmentData | None:
        info = read_git_info(input_data.workspace.current_dir, self.show_sha)
        if info is None:
            return None

        metadata = {
            "branch": info.branch,
            "status": info.status.value,
            "ahead": str(info.ahead),
            "behind": str(info.behind),
        }
        if info.sha is not None:
            metadata["sha"] = info.sha

        parts = [_STATUS_SYMBOLS[info.status]]
        if info.ahead > 0:
            parts.append(f"↑{info.ahead}")
        if info.behind > 0:
            parts.append(f"↓{info.behind}")
        if info.sha is not None:
            parts.append(info.sha)

        return SegmentData(primary=info.branch, secondary=" ".join(parts), metadata=metadata)