[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sigmoidfit"
version = "0.1.0"
description = "Parameter estimation for multisigmoidal lognormal diffusion processes from sampled paths"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "diffusion process",
    "sigmoidal growth",
    "maximum likelihood",
    "newton-raphson",
    "simulated annealing",
    "evolutionary algorithm",
    "differential evolution",
    "metaheuristics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
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
test = [
    "pytest",
]

[project.scripts]
sigmoidfit = "sigmoidfit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sigmoidfit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
