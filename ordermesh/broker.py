"""Message broker connection and the exchanges the services share."""

from __future__ import annotations

from typing import Any, Callable

import pika

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_PAID = "order.paid"


def amqp_url(user: str, password: str, host: str, port: str | int) -> str:
    """Build the AMQP address for the given credentials and endpoint."""
    return f"amqp://{user}:{password}@{host}:{port}/"


def declare_exchanges(channel: Any) -> None:
    """Declare the durable exchanges for order events on ``channel``."""
    channel.exchange_declare(
        exchange=EVENT_ORDER_CREATED,
        exchange_type="direct",
        durable=True,
        auto_delete=False,
        internal=False,
    )
    channel.exchange_declare(
        exchange=EVENT_ORDER_PAID,
        exchange_type="fanout",
        durable=True,
        auto_delete=False,
        internal=False,
    )


def connect(user: str, password: str, host: str, port: str | int) -> tuple[Any, Callable[[], None]]:
    """Open a connection and channel, declare exchanges.

    Returns the channel and a function that closes the connection.
    """
    connection = pika.BlockingConnection(pika.URLParameters(amqp_url(user, password, host, port)))
    channel = connection.channel()
    declare_exchanges(channel)
    return channel, connection.close