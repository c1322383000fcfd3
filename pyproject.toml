[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xv6tools"
version = "0.1.0"
description = "Tools for xv6 file system images, a small command shell, grep, printf formatting, keyboard and console input decoding, and thread demonstrations"
requires-python = ">=3.10"
dependencies = []
keywords = ["xv6", "filesystem", "mkfs", "shell", "grep", "keyboard", "threads", "operating-system"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
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
    "Topic :: System :: Filesystems",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv6-mkfs = "xv6tools.mkfs:main"
xv6-ls = "xv6tools.fsimage:main"
xv6-shell = "xv6tools.shell:main"
xv6-grep = "xv6tools.grep:main"
xv6-threads = "xv6tools.threads:main"

[tool.hatch.build.targets.wheel]
packages = ["xv6tools"]

[tool.hatch.build.targets.sdist]
include = ["xv6tools", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
