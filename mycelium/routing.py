from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock

MINECRAFT_PORT = 25565


@dataclass(frozen=True)
class LiveRegistration:
    name: str
    address: str
    port: int = MINECRAFT_PORT


class RoutingTable(ABC):
    """The proxy's live routing state, as seen by the reconciler.

    Host integrations subclass this and map each call onto the proxy's own
    registry. ``set_forced_hosts`` is the one operation proxies usually do not
    expose publicly; how it gets there is the subclass's business.
    """

    @abstractmethod
    def registrations(self) -> list[LiveRegistration]:
        raise NotImplementedError

    @abstractmethod
    def is_registered(self, name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def register(self, name: str, address: str, port: int = MINECRAFT_PORT) -> None:
        raise NotImplementedError

    @abstractmethod
    def unregister(self, name: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def attempt_order(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def remove_from_attempt_order(self, name: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_attempt_order(self, names: list[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def forced_hosts(self) -> dict[str, list[str]]:
        raise NotImplementedError

    @abstractmethod
    def set_forced_hosts(self, forced_hosts: dict[str, list[str]]) -> None:
        raise NotImplementedError


class InMemoryRoutingTable(RoutingTable):
    """Routing state kept in process memory (standalone host and tests)."""

    def __init__(
        self,
        servers: dict[str, str] | None = None,
        attempt_order: list[str] | None = None,
        forced_hosts: dict[str, list[str]] | None = None,
    ) -> None:
        self.lock = Lock()
        self.servers: dict[str, LiveRegistration] = {}  # name -> registration
        for name, address in (servers or {}).items():
            self.servers[name] = LiveRegistration(name=name, address=address)
        self.order: list[str] = list(attempt_order or [])
        self.hosts: dict[str, list[str]] = {h: list(v) for h, v in (forced_hosts or {}).items()}

    def registrations(self) -> list[LiveRegistration]:
        with self.lock:
            return list(self.servers.values())

    def is_registered(self, name: str) -> bool:
        with self.lock:
            return name in self.servers

    def get(self, name: str) -> LiveRegistration | None:
        with self.lock:
            return self.servers.get(name)

    def register(self, name: str, address: str, port: int = MINECRAFT_PORT) -> None:
        with self.lock:
            if name in self.servers:
                raise ValueError(f"Server '{name}' is already registered.")
            self.servers[name] = LiveRegistration(name=name, address=address, port=port)

    def unregister(self, name: str) -> None:
        with self.lock:
            self.servers.pop(name, None)

    def attempt_order(self) -> list[str]:
        with self.lock:
            return list(self.order)

    def remove_from_attempt_order(self, name: str) -> None:
        with self.lock:
            self.order = [n for n in self.order if n != name]

    def set_attempt_order(self, names: list[str]) -> None:
        with self.lock:
            self.order = list(names)

    def forced_hosts(self) -> dict[str, list[str]]:
        with self.lock:
            return {h: list(v) for h, v in self.hosts.items()}

    def set_forced_hosts(self, forced_hosts: dict[str, list[str]]) -> None:
        with self.lock:
            self.hosts = {h: list(v) for h, v in forced_hosts.items()}
