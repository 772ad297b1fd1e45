[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meltools"
version = "0.1.0"
description = "Editor toolkit: buffer search and replace with magic patterns, a small stack language, Blowfish file encryption and MD5 digests"
requires-python = ">=3.10"
keywords = [
    "editor",
    "search",
    "replace",
    "pattern",
    "stack-language",
    "interpreter",
    "blowfish",
    "md5",
]
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
    "Topic :: Text Editors",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Interpreters",
]
dependencies = [
    "mpmath",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mel = "meltools.melinterp:main"
mel-crypt = "meltools.cryptfile:main"
mel-md5 = "meltools.md5driver:main"

[tool.hatch.build.targets.wheel]
packages = ["meltools"]

[tool.pytest.ini_options]
addopts = "-ra"
