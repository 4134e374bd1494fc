[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rsyncsig"
version = "1.0.0"
description = "Rolling checksums, block signatures and signature loading for network deltas"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["rsync", "delta", "signature", "rolling checksum", "blake2", "md4"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Mirroring",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rsyncsig"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
