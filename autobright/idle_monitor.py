"""Idle and user-activity watches on the display server's idle monitor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .bus import BusProxy, call, ping
from .logger import Level, Logger
from .promise import Promise, log_exception, rejected, resolve_all, resolved
from .signals import Signal

BUS = "session"
SERVICE_NAME = "org.gnome.Mutter.IdleMonitor"
OBJECT_PATH = "/org/gnome/Mutter/IdleMonitor/Core"
INTERFACE_NAME = "org.gnome.Mutter.IdleMonitor"

GET_IDLETIME = "GetIdletime"
ADD_IDLE_WATCH = "AddIdleWatch"
ADD_USER_ACTIVE_WATCH = "AddUserActiveWatch"
REMOVE_WATCH = "RemoveWatch"
RESET_IDLETIME = "ResetIdletime"
WATCH_FIRED = "WatchFired"

ProxyFactory = Callable[[str, str, str, str], Promise]

_logger = Logger("[IdleMonitor]", Level.DEBUG)


def _new_proxy(proxy_factory: ProxyFactory) -> Promise:
    return proxy_factory(BUS, SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME)


@dataclass
class _Handled:
    count: int = 0


@dataclass(eq=False)
class Watch:
    """A registered watch; the object itself identifies it.

    An ``interval`` of zero marks a user-active watch, which fires once and
    then removes itself; idle watches stay until removed.
    """

    signal: Signal
    key: int
    interval: int
    handler: Callable[[], Any]

    @property
    def kind(self) -> str:
        return "idle" if self.interval else "user active"

    def __call__(self, key: int, handled: _Handled) -> None:
        if self.key != key:
            return
        if not self.interval:
            self.signal.disconnect(self)
        self.handler()
        handled.count += 1


class IdleMonitorProxy:
    """Adds, removes and refreshes watches on the idle monitor service.

    ``proxy_factory`` is called with the bus, service name, object path and
    interface name, and returns a promise of a :class:`BusProxy`.
    """

    def __init__(self, proxy_factory: ProxyFactory) -> None:
        self._proxy_factory = proxy_factory
        self._proxy: BusProxy | None = None
        self._watch_fired = Signal()

    @staticmethod
    def ping_service(proxy_factory: ProxyFactory) -> Promise:
        """Ensure the service exists by pinging it."""
        return _new_proxy(proxy_factory).chain(ping)

    def connect(self) -> Promise:
        if self._proxy is not None:
            return resolved()
        return _new_proxy(self._proxy_factory).chain(self._set_proxy)

    def get_idle_time(self) -> Promise:
        """The idle time in milliseconds."""
        return call(self._proxy, GET_IDLETIME).chain(lambda reply: reply[0])

    def add_idle_watch(self, interval: int, handler: Callable[[], Any]) -> Promise:
        """Call ``handler`` each time the user has been idle for ``interval`` ms.

        The promise resolves with the :class:`Watch`, which identifies it.
        """
        return call(self._proxy, ADD_IDLE_WATCH, interval).chain(
            lambda reply: self._register(reply[0], interval, handler))

    def add_user_active_watch(self, handler: Callable[[], Any]) -> Promise:
        """Call ``handler`` once, the next time the user becomes active."""
        return call(self._proxy, ADD_USER_ACTIVE_WATCH).chain(
            lambda reply: self._register(reply[0], 0, handler))

    def remove_watch(self, watch_id: Watch) -> Promise:
        watch = self._find_watch(watch_id)
        if watch is None:
            return resolved()

        key = watch.key
        self._watch_fired.disconnect(watch)

        promise = call(self._proxy, REMOVE_WATCH, key).chain(lambda reply: None)
        if _logger.is_debug():
            promise.then(lambda: _logger.debug(f"Removed watch: {key}"))
        return promise

    def reset_idle_time(self) -> Promise:
        return call(self._proxy, RESET_IDLETIME).chain(lambda reply: None)

    def remove_all(self) -> Promise:
        """Remove every watch; resolves once all removals have settled."""
        removals = [self.remove_watch(watch) for watch in self._watches()]
        return resolve_all(removals, log_exception("IdleMonitorProxy.remove_all"))

    def refresh_all(self) -> Promise:
        """Register every watch again, under the keys the service now gives."""
        watches = self._watches()
        removals = [
            call(self._proxy, REMOVE_WATCH, watch.key) for watch in watches]
        on_error = log_exception("IdleMonitorProxy.refresh_all")
        return resolve_all(removals, on_error).chain(
            lambda: self._refresh_keys(watches))

    def _watches(self) -> list[Watch]:
        return list(self._watch_fired.handlers())

    def _register(
        self, key: int, interval: int, handler: Callable[[], Any]
    ) -> Watch:
        if not key:
            raise RuntimeError("Service returned invalid key")
        watch = Watch(self._watch_fired, key, interval, handler)
        self._watch_fired.connect(watch)
        _logger.debug(f"Added {watch.kind} watch: {key}")
        return watch

    def _set_proxy(self, proxy: BusProxy | None) -> None:
        if self._proxy is proxy:
            return
        if self._proxy is not None:
            self._proxy.signal_received.disconnect(self._on_signal)
            self._proxy.name_owner_changed.disconnect(self._on_owner_changed)
        self._proxy = proxy
        if proxy is not None:
            proxy.signal_received.connect(self._on_signal)
            proxy.name_owner_changed.connect(self._on_owner_changed)

    def _on_signal(self, name: str, parameters: Any) -> None:
        if name == WATCH_FIRED:
            self._on_watch_fired(int(parameters[0]))

    def _on_owner_changed(self, owner: str | None) -> None:
        _logger.debug(f"Owner changed: {owner}")
        if not owner:
            return
        self.refresh_all().grab(
            log_exception("IdleMonitorProxy._on_owner_changed"))

    def _on_watch_fired(self, key: int) -> None:
        handled = _Handled()
        self._watch_fired.emit(key, handled)
        if handled.count != 1:
            _logger.warn(f"watchFired handled: {handled.count}")

    def _find_watch(self, watch_id: Any) -> Watch | None:
        for handler in self._watch_fired.handlers():
            if handler is watch_id:
                return handler
        return None

    def _refresh_keys(self, watches: list[Watch]) -> Promise:
        refreshes = [self._refresh_key(watch) for watch in watches]
        return resolve_all(
            refreshes, log_exception("IdleMonitorProxy.refresh_all"))

    def _refresh_key(self, watch_id: Watch) -> Promise:
        watch = self._find_watch(watch_id)
        if watch is None:
            return rejected(ValueError("Watch not found"))

        if watch.interval:
            promise = call(self._proxy, ADD_IDLE_WATCH, watch.interval)
        else:
            promise = call(self._proxy, ADD_USER_ACTIVE_WATCH)
        old_key = watch.key

        def on_new_key(reply: tuple) -> None:
            new_key = reply[0]
            if self._compare_and_set_key(watch, old_key, new_key):
                _logger.info(
                    f"Refreshed {watch.kind} watch: {old_key} -> {new_key}")
            else:
                _logger.error(
                    f"Failed to refresh {watch.kind} watch: "
                    f"{old_key} -> {new_key}")

        return promise.chain(on_new_key)

    def _compare_and_set_key(
        self, watch_id: Watch, old_key: int, new_key: int
    ) -> bool:
        watch = self._find_watch(watch_id)
        if watch is None or watch.key != old_key:
            return False
        watch.key = new_key
        return True