[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bcodegen"
version = "0.1.0"
description = "Intermediate representation, symbol bookkeeping and code generators (fasm x86_64 and a readable IR listing) for the B programming language"
requires-python = ">=3.10"
dependencies = []
keywords = ["b", "compiler", "codegen", "assembly", "x86_64", "fasm", "ir"]
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
    "Topic :: Software Development :: Compilers",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bcodegen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
