[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ostt"
version = "0.0.2"
description = "Open Speech-to-Text recording tool with real-time volume metering and transcription"
requires-python = ">=3.11"
keywords = ["speech-to-text", "transcription", "audio", "terminal", "whisper", "deepgram"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]
dependencies = [
    "httpx",
    "tomli-w",
    "blessed",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
    "respx",
    "pytest-mock",
]

[project.scripts]
ostt = "ostt.app:main"

[tool.hatch.build.targets.wheel]
packages = ["ostt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"
