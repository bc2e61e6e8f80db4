[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ironbar"
version = "0.1.0"
description = "Core of a customisable status bar: config model, dynamic values, ironvars, desktop-file lookup, clock formatting and an IPC protocol"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "status-bar",
    "bar",
    "wayland",
    "desktop",
    "ipc",
    "desktop-entry",
    "config",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers :: Applets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["ironbar"]

[tool.hatch.build.targets.sdist]
include = [
    "ironbar",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
