[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "llmschema"
version = "0.1.0"
description = "Request and response models for OpenAI-compatible chat, assistant, audio and batch APIs"
requires-python = ">=3.10"
dependencies = []
keywords = ["openai", "llm", "chat", "completions", "assistants", "audio", "batch", "schema", "json"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["llmschema"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 120
target-version = "py310"
