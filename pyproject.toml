[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "photomigrate"
version = "0.1.0"
description = "Schema migrations for a MySQL photo library database"
requires-python = ">=3.10"
keywords = ["mysql", "migrations", "schema", "photos", "database"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]
dependencies = [
    "pymysql",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
photomigrate = "photomigrate.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["photomigrate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
