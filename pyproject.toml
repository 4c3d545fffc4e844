[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "itemserver"
version = "0.1.0"
description = "A small JSON HTTP server with an in-memory item store, CORS and request logging."
requires-python = ">=3.10"
keywords = ["http", "server", "rest", "json", "starlette", "asgi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "starlette",
    "uvicorn",
]

[project.optional-dependencies]
test = [
    "pytest",
    "httpx",
]

[project.scripts]
itemserver = "itemserver.server:main"

[tool.hatch.build.targets.wheel]
packages = ["itemserver"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
