[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tictactue"
version = "0.1.0"
description = "A two-player networked tic-tac-toe game server with rooms, game clocks, chat and rematches"
requires-python = ">=3.10"
dependencies = []
keywords = ["tic-tac-toe", "game", "server", "multiplayer", "asyncio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
tictactue-server = "tictactue.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tictactue"]

[tool.pytest.ini_options]
addopts = "-ra"
