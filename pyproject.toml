[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyann"
version = "0.1.0"
description = "Small pure-Python neural network building blocks: perceptrons, multilayer networks, convolution, pooling and multi-head attention"
requires-python = ">=3.10"
dependencies = []
keywords = ["neural network", "perceptron", "mlp", "convolution", "pooling", "attention"]
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
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tinyann"]

[tool.pytest.ini_options]
addopts = "-ra"
