[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leafkit"
version = "0.1.0"
description = "Error ids, value-or-error results and diagnostic rendering, with a small calculator server and a task runner built on them"
requires-python = ">=3.10"
dependencies = []
keywords = ["error handling", "result", "diagnostics", "error id", "calculator", "http"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
leafkit-server = "leafkit.server:main"
leafkit-tasks = "leafkit.tasks:main"

[tool.hatch.build.targets.wheel]
packages = ["leafkit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
