import logging
from dataclasses import dataclass

import pytest

from ordermesh.decorator import (
    QueryLoggingDecorator,
    QueryMetricsDecorator,
    TodoMetrics,
    apply_command_decorators,
    apply_query_decorators,
    generate_action_name,
)


@dataclass
class CreateOrder:
    customer_id: str


class EchoHandler:
    def handle(self, cmd):
        return ("handled", cmd.customer_id)


class FailingHandler:
    def handle(self, cmd):
        raise ValueError("boom")


def test_generate_action_name_uses_type_name():
    assert generate_action_name(CreateOrder("c1")) == "CreateOrder"


def test_todo_metrics_accumulates():
    metrics = TodoMetrics()
    metrics.inc("k", 2)
    metrics.inc("k", 3)
    assert metrics.values["k"] == 5


def test_metrics_decorator_counts_success():
    metrics = TodoMetrics()
    decorated = QueryMetricsDecorator(base=EchoHandler(), client=metrics)
    assert decorated.handle(CreateOrder("c1")) == ("handled", "c1")
    assert metrics.values["querys.createorder.success"] == 1
    assert metrics.values["querys.createorder.duration"] == 0
    assert "querys.createorder.fail" not in metrics.values


def test_metrics_decorator_counts_failure():
    metrics = TodoMetrics()
    decorated = QueryMetricsDecorator(base=FailingHandler(), client=metrics)
    with pytest.raises(ValueError, match="boom"):
        decorated.handle(CreateOrder("c1"))
    assert metrics.values["querys.createorder.fail"] == 1
    assert "querys.createorder.success" not in metrics.values


def test_logging_decorator_logs_success(caplog):
    logger = logging.getLogger("ordermesh.test.decorator")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    decorated = QueryLoggingDecorator(logger=logger, base=EchoHandler())
    assert decorated.handle(CreateOrder("c7")) == ("handled", "c7")
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Executing query", "Query succeeded"]
    assert all(r.query == "CreateOrder" for r in caplog.records)
    assert "c7" in caplog.records[0].query_body


def test_logging_decorator_logs_failure(caplog):
    logger = logging.getLogger("ordermesh.test.decorator.fail")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    decorated = QueryLoggingDecorator(logger=logger, base=FailingHandler())
    with pytest.raises(ValueError):
        decorated.handle(CreateOrder("c1"))
    assert caplog.records[-1].levelno == logging.ERROR
    assert "boom" in caplog.records[-1].getMessage()


@pytest.mark.parametrize("apply", [apply_command_decorators, apply_query_decorators])
def test_apply_builds_logging_around_metrics(apply):
    handler = EchoHandler()
    metrics = TodoMetrics()
    logger = logging.getLogger("ordermesh.test.apply")
    decorated = apply(handler, logger, metrics)
    assert decorated.logger is logger
    assert decorated.base.base is handler
    assert decorated.base.client is metrics
    assert decorated.handle(CreateOrder("c2")) == ("handled", "c2")
    assert sum(v for k, v in metrics.values.items() if k.endswith(".success")) == 1