[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "queuebench"
version = "0.1.0"
description = "Concurrent FIFO queue algorithms with a throughput and latency benchmark harness"
requires-python = ">=3.10"
dependencies = []
keywords = ["queue", "concurrency", "lock-free", "benchmark", "fifo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
queuebench = "queuebench.benchmark:main"
queuebench-calibrate = "queuebench.calibrate:main"

[tool.hatch.build.targets.wheel]
packages = ["queuebench"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
