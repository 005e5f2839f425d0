"""Service registration and discovery backed by Consul's HTTP API."""

from __future__ import annotations

import abc
import logging
import random
import threading
from typing import Callable

import requests

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 1.0


class Registry(abc.ABC):
    """A service registry the services register with and discover from."""

    @abc.abstractmethod
    def register(self, instance_id: str, service_name: str, host_port: str) -> None:
        """Register one instance of a service at ``host:port``."""

    @abc.abstractmethod
    def deregister(self, instance_id: str, service_name: str) -> None:
        """Remove an instance from the registry."""

    @abc.abstractmethod
    def discover(self, service_name: str) -> list[str]:
        """Return ``host:port`` of every healthy instance of a service."""

    @abc.abstractmethod
    def health_check(self, instance_id: str, service_name: str) -> None:
        """Report the instance as alive."""


class ConsulRegistry(Registry):
    """Registry talking to a Consul agent."""

    def __init__(self, address: str = "127.0.0.1:8500", session: requests.Session | None = None):
        if "://" not in address:
            address = f"http://{address}"
        self.base_url = address.rstrip("/")
        self.session = session or requests.Session()

    def _put(self, path: str, payload: dict | None = None) -> None:
        response = self.session.put(f"{self.base_url}{path}", json=payload)
        response.raise_for_status()

    def register(self, instance_id: str, service_name: str, host_port: str) -> None:
        parts = host_port.split(":")
        if len(parts) != 2:
            raise ValueError("invalid host port")
        host, port_text = parts
        try:
            port = int(port_text)
        except ValueError:
            port = 0
        self._put(
            "/v1/agent/service/register",
            {
                "ID": instance_id,
                "Address": host,
                "Port": port,
                "Name": service_name,
                "Check": {
                    "CheckID": instance_id,
                    "TLSSkipVerify": False,
                    "TTL": "5s",
                    "Timeout": "5s",
                    "DeregisterCriticalServiceAfter": "10s",
                },
            },
        )

    def deregister(self, instance_id: str, service_name: str) -> None:
        logger.info(
            "deregister from consul",
            extra={"instanceID": instance_id, "serviceName": service_name},
        )
        self._put(f"/v1/agent/check/deregister/{instance_id}")

    def discover(self, service_name: str) -> list[str]:
        response = self.session.get(
            f"{self.base_url}/v1/health/service/{service_name}",
            params={"passing": "1"},
        )
        response.raise_for_status()
        return [f"{entry['Service']['Address']}:{entry['Service']['Port']}" for entry in response.json() or []]

    def health_check(self, instance_id: str, service_name: str) -> None:
        self._put(
            f"/v1/agent/check/update/{instance_id}",
            {"Status": "passing", "Output": "online"},
        )


def generate_instance_id(service_name: str) -> str:
    """Return a random instance id of the form ``<service>-<number>``."""
    return f"{service_name}-{random.SystemRandom().randint(0, 2**63 - 1)}"


def register_service(registry: Registry, service_name: str, grpc_addr: str) -> Callable[[], None]:
    """Register a new instance and keep its health check alive.

    Returns a function that stops the heartbeat and deregisters.
    """
    instance_id = generate_instance_id(service_name)
    registry.register(instance_id, service_name, grpc_addr)
    stop = threading.Event()

    def heartbeat() -> None:
        while not stop.is_set():
            try:
                registry.health_check(instance_id, service_name)
            except Exception as exc:
                logger.critical("no heartbeat from %s to registry, err=%s", service_name, exc)
                return
            stop.wait(HEARTBEAT_INTERVAL)

    threading.Thread(target=heartbeat, name=f"heartbeat-{service_name}", daemon=True).start()
    logger.info("register to consul", extra={"serviceName": service_name, "addr": grpc_addr})

    def deregister() -> None:
        stop.set()
        registry.deregister(instance_id, service_name)

    return deregister


def get_service_address(registry: Registry, service_name: str) -> str:
    """Pick one healthy instance address of a service at random."""
    addresses = registry.discover(service_name)
    if not addresses:
        raise LookupError(f"got empty {service_name} address from consul")
    logger.info("discovered %d instances of %s, addrs=%s", len(addresses), service_name, addresses)
    return random.choice(addresses)