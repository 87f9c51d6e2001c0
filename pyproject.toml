[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkit"
version = "0.1.0"
description = "Sv39 page tables, ELF headers, a small shell parser and classic Unix user tools, modelled in Python"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "risc-v",
    "sv39",
    "page-table",
    "elf",
    "shell",
    "grep",
    "malloc",
    "teaching",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xvkit-grep = "xvkit.grep:main"

[tool.hatch.build.targets.wheel]
packages = ["xvkit"]

[tool.pytest.ini_options]
addopts = "-ra"
