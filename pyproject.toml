[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "exrchunks"
version = "0.1.0"
description = "Read and write the raw pixel chunks of OpenEXR image files"
requires-python = ">=3.10"
dependencies = []
keywords = ["exr", "openexr", "image", "chunks", "hdr", "pixel blocks", "offset table"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["exrchunks"]

[tool.pytest.ini_options]
addopts = "-ra"
