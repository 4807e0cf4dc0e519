[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "forkbench"
version = "0.1.0"
description = "Models of fork-join runtime bookkeeping (frames, reducer maps, fiber pools, worker coordination) and divide-and-conquer benchmarks: fib, nqueens, cilksort and matrix multiply."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "fork-join",
    "work-stealing",
    "runtime",
    "benchmark",
    "reducers",
    "mergesort",
    "n-queens",
    "matrix-multiply",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
forkbench-fib = "forkbench.fib:main"
forkbench-nqueens = "forkbench.nqueens:main"
forkbench-cilksort = "forkbench.cilksort:main"
forkbench-mm-dac = "forkbench.mm_dac:main"

[tool.hatch.build.targets.wheel]
packages = ["forkbench"]

[tool.hatch.build.targets.sdist]
include = ["forkbench", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
