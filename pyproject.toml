[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshsim"
version = "0.1.0"
description = "Discrete-event simulation of leader-driven data dissemination over a mobile mesh network, with a blockgraph data model"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "simulation",
    "mesh network",
    "blockgraph",
    "mobility",
    "discrete-event",
    "distributed systems",
]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: System :: Networking",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
meshsim = "meshsim.experiment:main"

[tool.hatch.build.targets.wheel]
packages = ["meshsim"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
