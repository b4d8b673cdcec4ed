[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gosukit"
version = "0.1.0"
description = "Timing, judgment, scoring and chart preparation for a drum-style rhythm game mode"
requires-python = ">=3.10"
dependencies = []
keywords = ["rhythm game", "scoring", "judgment", "chart", "replay", "drum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gosukit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
