[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trackercore"
version = "0.1.0"
description = "Cryptocurrency price tracker: polls KuCoin spot prices, stores them and serves them over HTTP"
requires-python = ">=3.10"
keywords = ["cryptocurrency", "price", "tracker", "kucoin", "flask", "sqlalchemy"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "sqlalchemy",
    "requests",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
trackercore = "trackercore.app:main"

[tool.hatch.build.targets.wheel]
packages = ["trackercore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
