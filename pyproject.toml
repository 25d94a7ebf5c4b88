[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hrsdk"
version = "0.1.0"
description = "Client for HIWIN robot controllers: command protocol, joint motion and spline streaming over TCP"
requires-python = ">=3.10"
dependencies = []
keywords = ["robot", "robotics", "hiwin", "tcp", "motion-control", "modbus"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hrsdk"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
