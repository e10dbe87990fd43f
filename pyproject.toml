[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atpnet"
version = "0.1.0"
description = "Peer-to-peer networking building blocks: Kademlia-style DHT, peer scoring, address encoding, snapshots, framing, packet cipher and chain-sync helpers"
requires-python = ">=3.10"
keywords = ["p2p", "dht", "kademlia", "networking", "framing", "chacha20", "sync"]
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
    "Framework :: AsyncIO",
    "Topic :: System :: Networking",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["atpnet"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
