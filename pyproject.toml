[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "winharden"
version = "0.1.0"
description = "Harden or restore risky Windows, Office and Acrobat Reader features through the registry and system commands"
requires-python = ">=3.10"
dependencies = []
keywords = ["windows", "hardening", "security", "registry", "office", "defender"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["winharden"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
