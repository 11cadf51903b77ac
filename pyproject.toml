[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dnetkit"
version = "0.1.0"
description = "Array kernels, box utilities, configuration parsing and dataset loaders for small neural-network training pipelines"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["neural network", "mnist", "cifar", "bounding boxes", "nms", "config"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dnetkit"]

[tool.pytest.ini_options]
addopts = "-ra"
