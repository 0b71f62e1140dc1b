[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wificonf"
version = "0.1.0"
description = "Wi-Fi credential storage, a captive setup portal and station connection management"
requires-python = ">=3.10"
dependencies = []
keywords = ["wifi", "captive-portal", "credentials", "dns", "provisioning"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wificonf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
