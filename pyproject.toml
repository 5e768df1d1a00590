[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iqresample"
version = "0.1.0"
description = "Command-line checking, raw I/Q file passthrough and building blocks for I/Q sample tools"
requires-python = ">=3.10"
keywords = ["sdr", "iq", "dsp", "radio", "wav", "rf64", "rtl-sdr", "hackrf", "bladerf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
iqresample = "iqresample.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["iqresample"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
