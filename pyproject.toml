[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "olmapi"
version = "0.1.0"
description = "Data types and helpers for Operator Lifecycle Manager resources: cluster service versions, install plans, subscriptions, operator groups, catalog sources and manifest validation results."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kubernetes",
    "operators",
    "olm",
    "clusterserviceversion",
    "installplan",
    "subscription",
    "catalogsource",
    "validation",
]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["olmapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
