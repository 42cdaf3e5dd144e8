[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "lookout"
version = "0.1.0"
description = "Building blocks for assisted code review: analyzer comments, data scanners, events, an example analyzer and configuration loading"
requires-python = ">=3.10"
keywords = ["code-review", "static-analysis", "analyzer", "review", "lookout"]
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
    "Topic :: Software Development :: Quality Assurance",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.setuptools.packages.find]
include = ["lookout*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
