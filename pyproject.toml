[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flashq"
version = "0.1.0"
description = "Command-line client, HTTP API types and error classes for the FlashQ record queue"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["queue", "message-queue", "topics", "consumer-groups", "http", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
flashq-client = "flashq.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["flashq"]

[tool.pytest.ini_options]
addopts = "-ra"
