[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "airhost"
version = "1.71.0"
description = "Option parsing, DMAP metadata decoding, stream dumping and service settings for an AirPlay mirroring receiver"
requires-python = ">=3.10"
dependencies = []
keywords = ["airplay", "mirroring", "receiver", "dmap", "h264", "mdns"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
airhost = "airhost.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["airhost"]

[tool.pytest.ini_options]
addopts = "-ra"
