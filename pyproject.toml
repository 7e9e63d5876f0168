[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "horusline"
version = "1.1.2"
description = "Statusline building blocks for Claude Code: segments, model names and ANSI rendering"
requires-python = ">=3.11"
keywords = ["claude", "statusline", "powerline", "claude-code"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]
dependencies = [
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
    "freezegun",
]

[tool.hatch.build.targets.wheel]
packages = ["horusline"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
