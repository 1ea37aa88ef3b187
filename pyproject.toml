[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssrkit"
version = "0.1.0"
description = "Stream ciphers, one-time auth and auth_* framing protocols for a ShadowsocksR-style proxy"
requires-python = ">=3.10"
keywords = ["proxy", "socks", "stream cipher", "obfuscation", "one-time auth"]
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
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "cryptography",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ssrkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
