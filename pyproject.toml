[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fortigate_exporter"
version = "1.0.0"
description = "Prometheus-style metrics for Fortigate firewalls, collected through the FortiOS REST API"
requires-python = ">=3.10"
keywords = ["fortigate", "fortios", "prometheus", "exporter", "monitoring", "metrics", "firewall"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]
dependencies = [
    "pyyaml",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fortigate_exporter"]

[tool.pytest.ini_options]
addopts = "-ra"
