[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniob"
version = "0.1.0"
description = "Core pieces of a small teaching database server: result codes, SQL statement structures, tuple sets, sessions, a NUL-framed socket server and an interactive client."
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "sql", "server", "education", "tuple", "socket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
miniob-observer = "miniob.observer:main"
miniob-client = "miniob.client:main"

[tool.hatch.build.targets.wheel]
packages = ["miniob"]

[tool.pytest.ini_options]
addopts = "-ra"
