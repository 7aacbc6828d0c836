[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "raytracer"
version = "0.1.0"
description = "Vector maths, the cluster wire protocol, sessions and command-line handling for a distributed ray tracer"
requires-python = ">=3.10"
dependencies = []
keywords = ["raytracing", "rendering", "cluster", "vector", "protocol", "framing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["raytracer*"]

[tool.pytest.ini_options]
addopts = "-ra"
