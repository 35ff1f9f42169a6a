[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tulipstack"
version = "0.1.0"
description = "Building blocks for a user-space Ethernet/IPv4/ARP/ICMP stack and TCP connection state"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "tcp", "ipv4", "arp", "icmp", "ethernet", "checksum", "rss"]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tulipstack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
