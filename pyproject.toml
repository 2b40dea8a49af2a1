[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "medledger"
version = "0.1.0"
description = "In-memory ledgers for hospital registries, discharge planning, imaging orders, referrals and healthcare analytics"
requires-python = ">=3.10"
dependencies = []
keywords = ["healthcare", "hospital", "discharge", "radiology", "referrals", "analytics", "ledger"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["medledger"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
