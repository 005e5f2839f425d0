"""Order service endpoints (RPC-style and HTTP) and the stock client adapter."""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping

from flask import Flask, jsonify, request

from ordermesh.order_app import (
    CreateOrder,
    GetCustomerOrder,
    OrderApplication,
    StockService,
    UpdateOrder,
)
from ordermesh.order_domain import Item, ItemWithQuantity, Order, new_order

logger = logging.getLogger(__name__)


class StatusCode(enum.IntEnum):
    """RPC status codes returned to callers."""

    NOT_FOUND = 5
    INTERNAL = 13


class ServiceError(Exception):
    """An RPC failure carrying a status code."""

    def __init__(self, code: StatusCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class OrderServer:
    """The order service's RPC surface."""

    def __init__(self, application: OrderApplication):
        self.application = application

    def create_order(self, customer_id: str, items: list[ItemWithQuantity]) -> None:
        try:
            self.application.create_order.handle(CreateOrder(customer_id=customer_id, items=items))
        except Exception as exc:
            raise ServiceError(StatusCode.INTERNAL, str(exc)) from exc

    def get_order(self, customer_id: str, order_id: str) -> Order:
        try:
            return self.application.get_customer_order.handle(
                GetCustomerOrder(customer_id=customer_id, order_id=order_id)
            )
        except Exception as exc:
            raise ServiceError(StatusCode.NOT_FOUND, str(exc)) from exc

    def update_order(self, order: Order) -> None:
        logger.info("order_grpc || request_in || request=%r", order)
        try:
            validated = new_order(order.id, order.customer_id, order.status, order.payment_link, order.items)
        except ValueError as exc:
            raise ServiceError(StatusCode.INTERNAL, str(exc)) from exc
        self.application.update_order.handle(UpdateOrder(order=validated, update_fn=lambda o: o))


class StockGRPC(StockService):
    """Stock service adapter over a remote stock client."""

    def __init__(self, client: Any):
        self.client = client

    def check_if_items_in_stock(self, items: list[ItemWithQuantity]) -> Any:
        response = self.client.check_if_items_in_stock(items)
        logger.info("stock_grpc response %r", response)
        return response

    def get_items(self, item_ids: list[str]) -> list[Item]:
        return list(self.client.get_items(item_ids).items)


def _parse_items(raw: Any) -> list[ItemWithQuantity]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TypeError("items must be a list")
    parsed = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise TypeError("item must be an object")
        parsed.append(ItemWithQuantity(id=str(entry.get("id", "")), quantity=int(entry.get("quantity", 0))))
    return parsed


def create_http_app(application: OrderApplication) -> Flask:
    """Build the order service's HTTP API under ``/api``."""
    app = Flask("ordermesh.order")

    @app.post("/api/customer/<customer_id>/orders")
    def post_customer_orders(customer_id: str):
        payload = request.get_json(silent=True)
        if not isinstance(payload, Mapping):
            return jsonify({"error": "invalid request body"}), 400
        try:
            items = _parse_items(payload.get("items"))
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400
        try:
            result = application.create_order.handle(CreateOrder(customer_id=customer_id, items=items))
        except Exception as exc:
            return jsonify({"error": str(exc)}), 200
        return jsonify(
            {
                "message": "success",
                "customer_id": payload.get("customer_id", ""),
                "order_id": result.order_id,
            }
        ), 200

    @app.get("/api/customer/<customer_id>/orders/<order_id>")
    def get_customer_order(customer_id: str, order_id: str):
        try:
            order = application.get_customer_order.handle(
                GetCustomerOrder(customer_id=customer_id, order_id=order_id)
            )
        except Exception as exc:
            return jsonify({"error": str(exc)}), 200
        return jsonify({"message": "success", "data": order.to_dict()}), 200

    return app