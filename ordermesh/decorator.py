"""Logging and metrics wrappers around command and query handlers."""

from __future__ import annotations

import abc
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Protocol


class Handler(Protocol):
    """Anything that handles one command or query and returns a result."""

    def handle(self, cmd: Any) -> Any:
        """Handle ``cmd`` and return its result."""


class MetricsClient(abc.ABC):
    """Receives counter increments from the metrics decorator."""

    @abc.abstractmethod
    def inc(self, key: str, value: int) -> None:
        """Add ``value`` to the counter named ``key``."""


@dataclass
class TodoMetrics(MetricsClient):
    """In-process metrics client that only keeps running totals."""

    values: Counter = field(default_factory=Counter)

    def inc(self, key: str, value: int) -> None:
        self.values[key] += value


def generate_action_name(cmd: Any) -> str:
    """Return the bare type name of a command or query object."""
    return type(cmd).__name__


@dataclass(frozen=True)
class QueryLoggingDecorator:
    """Logs the start and the outcome of every handled command or query."""

    logger: logging.Logger
    base: Handler

    def handle(self, cmd: Any) -> Any:
        fields = {"query": generate_action_name(cmd), "query_body": repr(cmd)}
        self.logger.debug("Executing query", extra=fields)
        try:
            result = self.base.handle(cmd)
        except Exception as exc:
            self.logger.error("Failed to execute query: %s", exc, extra=fields)
            raise
        self.logger.info("Query succeeded", extra=fields)
        return result


@dataclass(frozen=True)
class QueryMetricsDecorator:
    """Reports duration and success or failure of every handled call."""

    base: Handler
    client: MetricsClient

    def handle(self, cmd: Any) -> Any:
        start = time.monotonic()
        action = generate_action_name(cmd).lower()
        succeeded = False
        try:
            result = self.base.handle(cmd)
            succeeded = True
            return result
        finally:
            elapsed = time.monotonic() - start
            self.client.inc(f"querys.{action}.duration", int(elapsed))
            outcome = "success" if succeeded else "fail"
            self.client.inc(f"querys.{action}.{outcome}", 1)


def _decorate(handler: Handler, logger: logging.Logger, metrics_client: MetricsClient) -> QueryLoggingDecorator:
    return QueryLoggingDecorator(
        logger=logger,
        base=QueryMetricsDecorator(base=handler, client=metrics_client),
    )


def apply_command_decorators(handler: Handler, logger: logging.Logger, metrics_client: MetricsClient) -> QueryLoggingDecorator:
    """Wrap a command handler with logging outside and metrics inside."""
    return _decorate(handler, logger, metrics_client)


def apply_query_decorators(handler: Handler, logger: logging.Logger, metrics_client: MetricsClient) -> QueryLoggingDecorator:
    """Wrap a query handler with logging outside and metrics inside."""
    return _decorate(handler, logger, metrics_client)