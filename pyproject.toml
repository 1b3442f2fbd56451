[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "hopshell"
version = "0.1.0"
description = "An interactive Linux shell with built-in directory, listing, search, history and job-control commands"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "command-line", "job-control", "history", "linux"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hopshell = "hopshell.shell:main"

[tool.setuptools.packages.find]
include = ["hopshell*"]

[tool.pytest.ini_options]
addopts = "-ra"
