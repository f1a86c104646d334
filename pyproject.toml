[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eulerdelay"
version = "1.0.0"
description = "Stereo delay effect with ping-pong, filtered feedback, tempo sync and XML presets"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "delay", "dsp", "effect", "ping-pong", "echo", "wav"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
eulerdelay = "eulerdelay.processor:main"

[tool.hatch.build.targets.wheel]
packages = ["eulerdelay"]

[tool.pytest.ini_options]
addopts = "-ra"
