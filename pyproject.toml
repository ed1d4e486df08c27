[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "odbkit"
version = "0.1.0"
description = "Readers for ODB++ job data: layer features, stroke fonts, notes and structured text"
requires-python = ">=3.10"
dependencies = []
keywords = ["odb++", "pcb", "cam", "eda", "parser", "features", "fonts"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["odbkit"]

[tool.hatch.build.targets.sdist]
include = ["odbkit", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
