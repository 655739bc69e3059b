[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "skylight"
version = "0.1.0"
description = "Models of a hobby operating system's descriptor tables, printf dialect, C-string routines, text console and heap"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "gdt",
    "idt",
    "tss",
    "printf",
    "itoa",
    "text-console",
    "framebuffer",
    "heap",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["skylight"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
