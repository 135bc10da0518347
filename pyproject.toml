[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qffconvert"
version = "1.2.14"
description = "Command-line media converter built on ffmpeg and ffprobe: probing, format selection, conversion and updates"
requires-python = ">=3.10"
dependencies = []
keywords = ["ffmpeg", "ffprobe", "media", "video", "audio", "image", "conversion", "gif"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qffconvert = "qffconvert.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["qffconvert"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
