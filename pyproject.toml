[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ddsload"
version = "0.1.0"
description = "Parse DDS texture files and lay out their mip chains and subresources"
requires-python = ">=3.10"
dependencies = []
keywords = ["dds", "texture", "dxgi", "mipmap", "directdraw-surface"]
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
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ddsload"]

[tool.pytest.ini_options]
addopts = "-ra"
