[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "f77units"
version = "0.1.0"
description = "Build abstract syntax trees and symbol tables for FORTRAN 77 program units"
requires-python = ">=3.10"
dependencies = []
keywords = ["fortran", "fortran77", "ast", "compiler", "symbol-table"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: Fortran",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["f77units"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
