[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyuser"
version = "0.1.0"
description = "Small Unix-style user tools, a file-system image builder, a Sv39 page-table model, a shell parser and helpers for a teaching operating system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "unix",
    "shell",
    "grep",
    "mkfs",
    "page-table",
    "virtio",
    "allocator",
    "teaching",
]
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
    "Topic :: Utilities",
    "Topic :: Education",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinyuser-mkfs = "tinyuser.mkfs:main"
tinyuser-grep = "tinyuser.grep:main"
tinyuser-wc = "tinyuser.wc:main"
tinyuser-cat = "tinyuser.cat:main"
tinyuser-echo = "tinyuser.echo:main"
tinyuser-ls = "tinyuser.ls:main"
tinyuser-kill = "tinyuser.kill:main"
tinyuser-ln = "tinyuser.ln:main"
tinyuser-mkdir = "tinyuser.mkdir:main"
tinyuser-rm = "tinyuser.rm:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyuser"]

[tool.hatch.build.targets.sdist]
include = ["tinyuser", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
