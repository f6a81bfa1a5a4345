[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "myst"
version = "0.1.0"
description = "Metadata query helpers for time series: query parsing, filter trees, id set operations, result grouping, caching and ingest record decoding"
requires-python = ">=3.10"
dependencies = []
keywords = ["timeseries", "metadata", "query", "filters", "segments"]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["myst"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
