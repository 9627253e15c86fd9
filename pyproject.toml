[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hanadocstore"
version = "0.1.0"
description = "FJSON encoding, SQL filter and projection building, and connection helpers for a SAP HANA JSON document store behind a MongoDB-style front end"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "document-store", "sql", "mongodb", "hana", "query-builder"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hanadocstore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
