[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "unified-intelligence"
version = "2.0.0"
description = "Workflow states, thinking modes, rate limiting and recall and knowledge-graph handlers for thought-capture tool servers"
requires-python = ">=3.10"
dependencies = [
    "termcolor",
]
keywords = ["llm", "thinking-frameworks", "knowledge-graph", "rate-limiting", "mcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["unified_intelligence"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
