[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "everythingnet"
version = "1.0.1"
description = "Peer discovery mesh over UDP broadcast that shares each node's platform information"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "broadcast", "multicast", "discovery", "mesh", "udp", "printf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
everythingnet = "everythingnet.main:main"

[tool.hatch.build.targets.wheel]
packages = ["everythingnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
