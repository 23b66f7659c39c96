[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hauler"
version = "0.1.0"
description = "Collect files, directories, HTTP content and in-memory blobs into a local OCI image layout store"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["oci", "container", "layout", "artifacts", "airgap", "blobs"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hauler"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
