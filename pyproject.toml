[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bare6502"
version = "1.0.0"
description = "A MOS 6502 CPU emulator with a bare-bones banked-memory machine around it"
requires-python = ">=3.10"
dependencies = []
keywords = ["6502", "mos6502", "emulator", "cpu", "8-bit", "retro"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bare6502 = "bare6502.machine:main"

[tool.hatch.build.targets.wheel]
packages = ["bare6502"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
