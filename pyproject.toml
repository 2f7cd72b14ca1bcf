[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "autobright"
version = "0.1.0"
description = "Automatic screen brightness driven by an ambient light sensor, aware of user idleness"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "brightness",
    "backlight",
    "ambient light",
    "light sensor",
    "idle monitor",
    "promise",
    "signals",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["autobright"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
