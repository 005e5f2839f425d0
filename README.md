# ordermesh

Building blocks for a small order-processing system split into three
services: **order**, **stock** and **payment**. Each service is a set of
command and query handlers wrapped by shared logging and metrics
decorators. The services reach each other through small adapter classes,
register in a Consul catalogue and pass order events over RabbitMQ.

## Modules

| Module | Purpose |
| --- | --- |
| `ordermesh.config` | `Config` and `load_config`: YAML settings with environment overrides. |
| `ordermesh.logsetup` | `JSONFormatter`, `init_logging`, `set_formatter`. |
| `ordermesh.decorator` | `QueryLoggingDecorator`, `QueryMetricsDecorator`, `apply_command_decorators`, `apply_query_decorators`, `MetricsClient`, `TodoMetrics`. |
| `ordermesh.broker` | `connect`, `declare_exchanges`, `amqp_url` and the `order.created` / `order.paid` event names. |
| `ordermesh.discovery` | `Registry`, `ConsulRegistry`, `register_service`, `get_service_address`, `generate_instance_id`. |
| `ordermesh.order_domain` | `Order`, `Item`, `ItemWithQuantity`, `new_order`, `OrderNotFoundError`, the `Repository` contract and JSON helpers. |
| `ordermesh.order_memory` | `MemoryOrderRepository`. |
| `ordermesh.order_app` | Create-order, update-order and get-customer-order handlers, `pack_items`, `new_application`. |
| `ordermesh.order_ports` | `OrderServer`, `StockGRPC`, `create_http_app`, `ServiceError` and `StatusCode`. |
| `ordermesh.stock_domain` | `StockRepository`, `MemoryStockRepository`, `ItemsNotFoundError`. |
| `ordermesh.stock_app` | Stock queries, `StockServer`, `new_application`. |
| `ordermesh.payment_app` | `InMemProcessor`, `StripeProcessor`, `OrderGRPC`, `CreatePaymentHandler`, `new_application`. |
| `ordermesh.payment_consumer` | `Consumer` for `order.created` messages and `create_payment_http_app`. |

Install with `pip install .`; the test suite needs the `test` extra
(pytest and responses).

## How the pieces fit

1. An order is created through the order service (`OrderServer.create_order`
   or `POST /api/customer/<customer_id>/orders` on `create_http_app`).
   Entries with the same item id are merged by `pack_items`, the stock
   service attaches a price id to each item, the order is stored and its JSON
   form is published to the durable `order.created` queue.
2. The payment service's `Consumer` reads the message, asks its `Processor`
   for a payment link and passes the order back to the order service with
   status `waiting_for_payment` and the link attached. The message is acked
   on success and rejected without requeue when it cannot be parsed or the
   payment fails.
3. The customer fetches the order, with its payment link, through the order
   service.

The services can be wired together in one process, since the adapters take
any object with the matching methods:

```python
from ordermesh import order_app, payment_app, stock_app
from ordermesh.broker import connect
from ordermesh.order_ports import OrderServer, StockGRPC
from ordermesh.payment_app import InMemProcessor, OrderGRPC

password = "password"
channel, close = connect("user", password, "localhost", 5672)

stock = stock_app.StockServer(stock_app.new_application())
orders = OrderServer(order_app.new_application(StockGRPC(stock), channel))
payments = payment_app.new_application(OrderGRPC(orders), InMemProcessor())
```

## Order service

`new_order` rejects an empty id, customer id or status, and a missing item
list, with `ValueError`. `MemoryOrderRepository` starts with one
placeholder order (`fake-ID` for customer `fake-CustomerID`), gives new
orders the current Unix time in seconds as their id, and raises
`OrderNotFoundError` for an unknown id and customer pair:

```python
from ordermesh.order_domain import OrderNotFoundError
from ordermesh.order_memory import MemoryOrderRepository

repo = MemoryOrderRepository()
try:
    repo.get("missing", "customer-1")
except OrderNotFoundError as exc:
    print(exc)  # Order 'missing' not found
```

`OrderServer` raises `ServiceError` with `StatusCode.INTERNAL` when creating
or validating an order fails and `StatusCode.NOT_FOUND` when a lookup fails.

`create_http_app(application)` returns a Flask app with:

- `POST /api/customer/<customer_id>/orders` with a JSON body such as
  `{"customer_id": "c1", "items": [{"id": "item1", "quantity": 2}]}`.
  A body that is not a JSON object, or malformed items, gives status 400.
  On success it answers `{"message": "success", "customer_id": ..., "order_id": ...}`;
  a failure in the handler is reported as `{"error": ...}` with status 200.
- `GET /api/customer/<customer_id>/orders/<order_id>`, answering
  `{"message": "success", "data": <order>}` or `{"error": ...}`, both with
  status 200.

## Stock service

`MemoryStockRepository` holds the stub items `item_id`, `item1`, `item2`
and `item3`, 1000 of each. `get_items` returns the items it finds in the
requested order and raises `ItemsNotFoundError` only when none was found.
The stock check gives item `1` and `2` their own price ids and every other
item the price id of item `1`; `StockServer.check_if_items_in_stock`
answers with `in_stock=1` and the priced items.

## Payment service

- `InMemProcessor` always returns `inmem-payment-link`.
- `StripeProcessor(api_key, api_base=..., success_url=..., session=None)`
  creates a hosted checkout session in payment mode with one line item per
  order item and the order's id, customer id, status and items as metadata,
  and returns the session URL. An empty key raises `ValueError`.
- `create_payment_http_app()` serves `POST /api/webhook`, which logs the
  call and answers an empty 200.

## Decorators and metrics

`apply_command_decorators` and `apply_query_decorators` wrap a handler with
logging outside and metrics inside. The metrics wrapper reports
`querys.<name>.duration` (whole seconds) and `querys.<name>.success` or
`querys.<name>.fail`, where `<name>` is the lower-cased type name of the
command. `TodoMetrics` keeps these totals in its `values` counter.

## Configuration

`load_config(search_paths, name)` reads `<name>.yaml`, `<name>.yml` or
`<name>` from the first directory in `search_paths` that holds one
(defaults: `("../common/config",)` and `"global"`) and raises
`ConfigNotFoundError` otherwise. Keys are case-insensitive;
`get_string("a.b")` returns the value as text, or `""` when unset, and
`sub(key)` returns a section as its own `Config` (raising `KeyError` if it
is not a section).

For a `Config` returned by `load_config`, a non-empty environment variable
named after the full key, upper case with `-` turned into `_` (so
`stripe-key` is read from `STRIPE_KEY`), takes precedence over the file.
Sections returned by `sub` read only the file.

```yaml
order:
  service-name: order
  grpc-addr: 127.0.0.1:5002
  http-addr: 127.0.0.1:8282
stock:
  service-name: stock
  grpc-addr: 127.0.0.1:5003
consul:
  address: localhost:8500
rabbitmq:
  user: user
  password: password
  host: localhost
  port: 5672
stripe-key: placeholder
```

## Logging

`init_logging()` sends root log records as JSON (fields `level`, `time`,
`msg` plus any extra fields) and sets the level to debug.
`set_formatter(logger)` switches the root output to `severity`, `time` and
`message`, and gives `logger` plain-text output when `LOCAL_MODE` is true.

## Service discovery

`ConsulRegistry(address)` talks to a Consul agent's HTTP API.
`register_service(registry, service_name, grpc_addr)` registers an instance
with a 5 s TTL check, sends a heartbeat every second from a background
thread and returns a function that stops the heartbeat and deregisters.
`get_service_address(registry, service_name)` picks one healthy instance at
random and raises `LookupError` when there is none.

## What the package does not do

- It has no commands or entry points that start a service; wiring the
  handlers, the broker channel and the HTTP apps into running processes is
  left to the caller.
- `OrderServer` and `StockServer` are plain Python objects; there is no RPC
  transport serving them over the network.
- Orders and stock live only in memory and are lost when the process ends.
- The payment webhook does not process the events it receives.