[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "osdbexporter"
version = "0.1.0"
description = "Prometheus-style gauges for OpenStack identity, container infrastructure and shared file systems, built from service database rows"
requires-python = ">=3.10"
dependencies = []
keywords = ["openstack", "prometheus", "metrics", "exporter", "keystone", "magnum", "manila"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["osdbexporter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
