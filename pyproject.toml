[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "textetris"
version = "1.0.0"
description = "A terminal Tetris game with a persistent, searchable score history"
requires-python = ">=3.10"
dependencies = []
keywords = ["tetris", "game", "terminal", "console", "puzzle", "avl"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
textetris = "textetris.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["textetris"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
