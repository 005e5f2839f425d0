"""Consumes order-created events and serves the payment webhook."""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import Flask

from ordermesh.broker import EVENT_ORDER_CREATED
from ordermesh.order_domain import order_from_dict
from ordermesh.payment_app import CreatePayment, PaymentApplication

logger = logging.getLogger(__name__)


class Consumer:
    """Creates a payment for every order-created message."""

    def __init__(self, application: PaymentApplication):
        self.application = application

    def listen(self, channel: Any) -> None:
        """Consume the order-created queue until the channel stops."""
        declared = channel.queue_declare(
            queue=EVENT_ORDER_CREATED,
            durable=True,
            exclusive=False,
            auto_delete=False,
        )
        queue_name = declared.method.queue
        try:
            channel.basic_consume(
                queue=queue_name,
                on_message_callback=self.handle_message,
                auto_ack=False,
            )
        except Exception as exc:
            logger.warning("fail to consume: queue=%s, err=%s", queue_name, exc)
            return
        channel.start_consuming()

    def handle_message(self, channel: Any, method: Any, properties: Any, body: bytes) -> None:
        """Handle one delivery: ack on success, reject without requeue on failure."""
        text = body.decode("utf-8", errors="replace") if isinstance(body, (bytes, bytearray)) else str(body)
        logger.info("payment receive a message from %s, msg=%s", EVENT_ORDER_CREATED, text)

        try:
            data = json.loads(body)
            if not isinstance(data, dict):
                raise ValueError("order must be a JSON object")
            order = order_from_dict(data)
        except (ValueError, TypeError) as exc:
            logger.info("fail to unmarshal order, err=%s", exc)
            channel.basic_nack(delivery_tag=method.delivery_tag, multiple=False, requeue=False)
            return

        try:
            self.application.create_payment.handle(CreatePayment(order=order))
        except Exception as exc:
            logger.info("fail to create payment, err=%s", exc)
            channel.basic_nack(delivery_tag=method.delivery_tag, multiple=False, requeue=False)
            return

        channel.basic_ack(delivery_tag=method.delivery_tag, multiple=False)
        logger.info("consume successfully")


def create_payment_http_app() -> Flask:
    """Build the payment service's HTTP API with the webhook endpoint."""
    app = Flask("ordermesh.payment")

    @app.post("/api/webhook")
    def handle_webhook():
        logger.info("Got webhook from stripe")
        return "", 200

    return app