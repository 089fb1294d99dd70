[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sphvoronoi"
version = "0.1.0"
description = "Building blocks for spherical Voronoi diagrams on the unit sphere: generator merging, sharded vertex deduplication and edge repair"
requires-python = ">=3.10"
dependencies = []
keywords = ["voronoi", "sphere", "geometry", "s2", "computational-geometry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sphvoronoi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
