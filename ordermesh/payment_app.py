"""Payment processors, the create-payment command and its application."""

from __future__ import annotations

import abc
import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

from ordermesh.decorator import MetricsClient, QueryLoggingDecorator, TodoMetrics, apply_command_decorators
from ordermesh.order_domain import Order

logger = logging.getLogger(__name__)

STRIPE_API_BASE = "https://api.stripe.com"
SUCCESS_URL = "http://localhost:8282/success"
INMEM_PAYMENT_LINK = "inmem-payment-link"
WAITING_FOR_PAYMENT = "waiting_for_payment"


class Processor(abc.ABC):
    """Creates payment links for orders."""

    @abc.abstractmethod
    def create_payment_link(self, order: Order) -> str:
        """Return a link the customer can pay the order at."""


class OrderService(abc.ABC):
    """What the payment service needs from the order service."""

    @abc.abstractmethod
    def update_order(self, order: Order) -> None:
        """Store the new state of an order."""


class InMemProcessor(Processor):
    """Processor that always hands out the same fixed link."""

    def create_payment_link(self, order: Order) -> str:
        return INMEM_PAYMENT_LINK


class StripeProcessor(Processor):
    """Processor creating hosted checkout sessions."""

    def __init__(
        self,
        api_key: str,
        *,
        api_base: str = STRIPE_API_BASE,
        success_url: str = SUCCESS_URL,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ValueError("apiKey is empty")
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.success_url = success_url
        self.session = session or requests.Session()

    def create_payment_link(self, order: Order) -> str:
        items = order.items or []
        marshalled_items = json.dumps(
            None if order.items is None else [item.to_dict() for item in items],
            separators=(",", ":"),
        )
        metadata = {
            "orderID": order.id,
            "customerID": order.customer_id,
            "status": order.status,
            "items": marshalled_items,
        }
        form: list[tuple[str, str]] = [("mode", "payment"), ("success_url", self.success_url)]
        for position, item in enumerate(items):
            form.append((f"line_items[{position}][price]", item.price_id))
            form.append((f"line_items[{position}][quantity]", str(item.quantity)))
        form.extend((f"metadata[{key}]", value) for key, value in metadata.items())

        response = self.session.post(
            f"{self.api_base}/v1/checkout/sessions",
            data=form,
            auth=(self.api_key, ""),
        )
        response.raise_for_status()
        return str(response.json().get("url") or "")


class OrderGRPC(OrderService):
    """Order service adapter over a remote order client."""

    def __init__(self, client: Any):
        self.client = client

    def update_order(self, order: Order) -> None:
        try:
            self.client.update_order(order)
        except Exception as exc:
            logger.info("payment_adapter || update_order, err=%s", exc)
            raise
        logger.info("payment_adapter || update_order, err=None")


@dataclass(frozen=True)
class CreatePayment:
    order: Order


class CreatePaymentHandler:
    """Creates a payment link and marks the order as awaiting payment."""

    def __init__(self, processor: Processor, order_service: OrderService):
        self.processor = processor
        self.order_service = order_service

    def handle(self, cmd: CreatePayment) -> str:
        link = self.processor.create_payment_link(cmd.order)
        logger.info("create payment link for order: %s success, payment link: %s", cmd.order.id, link)
        self.order_service.update_order(
            Order(
                id=cmd.order.id,
                customer_id=cmd.order.customer_id,
                status=WAITING_FOR_PAYMENT,
                items=cmd.order.items,
                payment_link=link,
            )
        )
        return link


@dataclass(frozen=True)
class PaymentApplication:
    """The decorated handlers of the payment service."""

    create_payment: Any


def new_create_payment_handler(
    processor: Processor,
    order_service: OrderService,
    logger: logging.Logger,
    metrics_client: MetricsClient,
) -> QueryLoggingDecorator:
    """Build the create-payment handler wrapped with logging and metrics."""
    return apply_command_decorators(CreatePaymentHandler(processor, order_service), logger, metrics_client)


def new_application(order_service: OrderService, processor: Processor) -> PaymentApplication:
    """Wire the payment service."""
    app_logger = logging.getLogger("ordermesh.payment")
    return PaymentApplication(
        create_payment=new_create_payment_handler(processor, order_service, app_logger, TodoMetrics()),
    )