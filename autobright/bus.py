"""Message-bus proxies: errors, method calls and property access."""

from __future__ import annotations

import abc
from typing import Any

from .promise import Promise, rejected
from .signals import Signal

PEER_PING = "org.freedesktop.DBus.Peer.Ping"
PROPERTIES_GET = "org.freedesktop.DBus.Properties.Get"
PROPERTIES_SET = "org.freedesktop.DBus.Properties.Set"


class BusError(Exception):
    """An error reported by the bus, with optional domain and code."""

    def __init__(
        self,
        message: str | None = None,
        domain: str | None = None,
        code: int = 0,
    ) -> None:
        super().__init__(message if message is not None else "No reason")
        self.message = message
        self.domain = domain
        self.code = code


class BusProxy(abc.ABC):
    """A remote object exposing one interface on a message bus.

    Concrete proxies implement :meth:`invoke` and :meth:`get_cached_property`
    and emit ``properties_changed(changed, invalidated)``,
    ``signal_received(name, parameters)`` and ``name_owner_changed(owner)``.
    """

    def __init__(self, interface_name: str) -> None:
        self.interface_name = interface_name
        self.properties_changed = Signal()
        self.signal_received = Signal()
        self.name_owner_changed = Signal()

    @abc.abstractmethod
    def get_cached_property(self, name: str) -> Any:
        """The locally cached value of property ``name``, or None."""

    @abc.abstractmethod
    def invoke(self, method: str, *args: Any) -> Promise:
        """Call ``method``; the promise resolves with the tuple of replies."""

    def get_property(self, name: str) -> Promise:
        """Fetch property ``name`` from the remote object."""
        return call(self, PROPERTIES_GET, self.interface_name, name).chain(
            lambda reply: reply[0])

    def set_property(self, name: str, value: Any) -> Promise:
        """Set property ``name`` on the remote object."""
        return call(
            self, PROPERTIES_SET, self.interface_name, name, value
        ).chain(lambda reply: None)


def call(proxy: BusProxy | None, method: str, *args: Any) -> Promise:
    """Call ``method`` on ``proxy``; the promise resolves with the replies."""
    if proxy is None:
        return rejected(ValueError("Proxy is null"))
    try:
        return proxy.invoke(method, *args)
    except Exception as exc:
        return rejected(exc)


def ping(proxy: BusProxy | None) -> Promise:
    """Check that the remote peer answers."""
    return call(proxy, PEER_PING).chain(lambda reply: None)