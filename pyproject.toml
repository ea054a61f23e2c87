[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sntpsync"
version = "4.0.0"
description = "An RFC 5905 compliant Simple Network Time Protocol (SNTP) client library with blocking and asyncio APIs"
requires-python = ">=3.10"
dependencies = []
keywords = ["sntp", "ntp", "time", "asyncio", "clock"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Networking :: Time Synchronization",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
sntpsync = "sntpsync.client:main"

[tool.hatch.build.targets.wheel]
packages = ["sntpsync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
