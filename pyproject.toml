[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vulnreach"
version = "0.1.0"
description = "OSV vulnerability records and reachability analysis of known vulnerabilities through import, module and call graphs"
requires-python = ">=3.10"
dependencies = []
keywords = ["osv", "vulnerability", "security", "call-graph", "import-graph", "semver"]
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
    "Topic :: Security",
    "Topic :: Software Development :: Quality Assurance",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vulnreach"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
