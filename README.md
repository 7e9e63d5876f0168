# horusline

Building blocks for a Claude Code statusline. The package reads the session JSON that
Claude Code sends, collects segments from it (model, directory, git state, context window
use, cost, session time, output style) and renders them into one ANSI-coloured line.

## Installation

```
pip install horusline
```

## Modules

- `horusline.config`: `Config` (style, segments, theme name) with `from_dict`, `to_dict`,
  `to_toml`, `load`, `save`, `check`, `matches` and `find_segment`; `InputData.from_dict`
  for the JSON from Claude Code; `SegmentId`, `StyleMode` and the colours `Color16`,
  `Color256` and `Rgb`. Invalid documents raise `ConfigError`. `Config.load()` reads
  `~/.claude/horus/config.toml` by default.
- `horusline.tokens`: `RawUsage`, `NormalizedUsage` and `TranscriptEntry`. These read the
  token usage records of transcripts in Anthropic or OpenAI form.
- `horusline.models`: `ModelConfig` maps model ids to display names and context limits.
  Claude Sonnet, Opus and Haiku ids are recognised and their version is taken from the id.
  Entries match by substring and take priority over that. Context modifiers such as
  `[1m]` override the limit and add a suffix to the name. `ModelConfig.load()` puts the
  entries from `~/.claude/horus/models.toml`, or from `models.toml` in the current
  directory, in front of the defaults. If the user file is missing, it writes a commented
  template there.
- Segments, each with a `collect(input_data)` method that returns a `SegmentData`, or
  `None` when it has nothing to show:
  `ModelSegment`, `DirectorySegment`, `GitSegment(show_sha=...)` (runs `git`),
  `ContextWindowSegment` (reads the transcript), `CostSegment`, `SessionSegment` and
  `OutputStyleSegment`.
- `horusline.segment`: `SegmentData`, `render_progress_bar` and `read_bar_cells`.
- `horusline.statusline`: `StatusLineGenerator(config, width=None).generate(pairs)`.

## Example

```python
import json
import sys

from horusline.config import Config, InputData, SegmentId
from horusline.directory import DirectorySegment
from horusline.model_segment import ModelSegment
from horusline.statusline import StatusLineGenerator

config = Config.load()
data = InputData.from_dict(json.load(sys.stdin))

pairs = []
for segment_id, segment in (
    (SegmentId.MODEL, ModelSegment()),
    (SegmentId.DIRECTORY, DirectorySegment()),
):
    seg_config = config.find_segment(segment_id)
    collected = segment.collect(data)
    if seg_config is not None and collected is not None:
        pairs.append((seg_config, collected))

print(StatusLineGenerator(config).generate(pairs))
```

## Width

Every segment is shown unless a width is set. You can pass `width` to
`StatusLineGenerator`, or set `HORUS_WIDTH=<columns>`. When the line is too wide, the
secondary text is dropped first. Then whole segments are dropped in order of priority,
starting with the lowest.

## What this package does not do

- It installs no command. Reading standard input and printing the line is up to the
  caller, as in the example above.
- It has no built-in themes and no default configuration. `Config.load()` needs an
  existing configuration file.
- It does not fetch Claude plan usage (5-hour and 7-day windows) or Codex rate limits.
  The `usage`, `hourly_usage`, `weekly_usage`, `codex_usage` and `update` segment ids are
  recognised in configuration, but no segment collects data for them.
- It does not patch any files.