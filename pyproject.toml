[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ofcatalog"
version = "0.1.0"
description = "Component catalog reconciliation: owner and link resolution, documentation and dependency sync, and metric computation for catalogued components"
requires-python = ">=3.10"
dependencies = []
keywords = ["catalog", "components", "scorecards", "metrics", "reconciliation", "developer-portal"]
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
    "Topic :: Software Development :: Quality Assurance",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ofcatalog"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
