[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ordermesh"
version = "0.1.0"
description = "Order, stock and payment services built from command and query handlers, with Consul discovery and RabbitMQ events"
requires-python = ">=3.10"
keywords = [
    "orders",
    "stock",
    "payments",
    "microservices",
    "cqrs",
    "rabbitmq",
    "consul",
]
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
    "Topic :: Office/Business",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pika",
    "pyyaml",
    "requests",
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["ordermesh"]

[tool.hatch.build.targets.sdist]
include = [
    "ordermesh",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
