"""Segment showing the name of the current working directory."""

from __future__ import annotations

from horusline.config import InputData, SegmentId
from horusline.segment import SegmentData


def extract_directory_name(path: str) -> str:
    """Last path component, for either ``/`` or ``\\`` separators; ``root`` if empty."""
    unix_name = path.split("/")[-1]
    windows_name = path.split("\\")[-1]
    if len(windows_name) < len(path):
        name = windows_name
    elif len(unix_name) < len(path):
        name = unix_name
    else:
        name = path
    return name or "root"


class DirectorySegment:
    segment_id = SegmentId.DIRECTORY

    def collect(self, input_data: InputData) -> SegmentData:
        current_dir = input_data.workspace.current_dir
        return SegmentData(
            primary=extract_directory_name(current_dir),
            metadata={"full_path": current_dir},
        )