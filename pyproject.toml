[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aesdsocket"
version = "0.1.0"
description = "A small TCP server that appends newline-terminated packets to a data file and echoes the file back"
requires-python = ">=3.10"
dependencies = []
keywords = ["socket", "tcp", "server", "daemon", "linked-list"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
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
aesdsocket = "aesdsocket.server:main"
aesdsocket-echo = "aesdsocket.echo:main"

[tool.hatch.build.targets.wheel]
packages = ["aesdsocket"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
