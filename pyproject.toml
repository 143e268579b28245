[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "singcommon"
version = "0.1.0"
description = "Building blocks for network proxy software: byte buffers, error helpers, SOCKS addresses, domain matching, ABX reading, LRU caching and idle timers"
requires-python = ">=3.10"
dependencies = []
keywords = ["proxy", "socks", "buffer", "lru", "abx", "domain-matcher", "networking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["singcommon"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
