"""Screen brightness, read and written through the power settings service."""

from __future__ import annotations

import abc
from typing import Any, Callable

from .bus import BusProxy, ping
from .logger import Level, Logger
from .promise import Promise, Result, rejected, resolved
from .signals import Signal

BUS = "session"
SERVICE_NAME = "org.gnome.SettingsDaemon.Power"
OBJECT_PATH = "/org/gnome/SettingsDaemon/Power"
INTERFACE_NAME = "org.gnome.SettingsDaemon.Power.Screen"
BRIGHTNESS_PROPERTY = "Brightness"

ProxyFactory = Callable[[str, str, str, str], Promise]

_logger = Logger("[BrightnessProxy]", Level.DEBUG)


class BrightnessSource(abc.ABC):
    """Something that reports and accepts a screen brightness.

    ``brightness_changed`` is emitted, without arguments, whenever the
    reported brightness changes.
    """

    def __init__(self) -> None:
        self.brightness_changed = Signal()

    @abc.abstractmethod
    def connect(self) -> Promise:
        """Get ready; the promise resolves once a brightness is known."""

    @abc.abstractmethod
    def set_brightness(self, value: int) -> Promise:
        """Request a new brightness."""

    @property
    @abc.abstractmethod
    def brightness(self) -> int:
        """The last known brightness, or -1 when it is not known yet."""


def _new_proxy(proxy_factory: ProxyFactory) -> Promise:
    return proxy_factory(BUS, SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME)


class BrightnessProxy(BrightnessSource):
    """The brightness of the screen as exposed by the power service.

    ``proxy_factory`` is called with the bus, service name, object path and
    interface name, and returns a promise of a :class:`BusProxy`.
    """

    def __init__(self, proxy_factory: ProxyFactory) -> None:
        super().__init__()
        self._proxy_factory = proxy_factory
        self._proxy: BusProxy | None = None
        self._brightness = -1

    @staticmethod
    def ping_service(proxy_factory: ProxyFactory) -> Promise:
        """Ensure the service exists by pinging it."""
        return _new_proxy(proxy_factory).chain(ping)

    def connect(self) -> Promise:
        return self._ensure_proxy().chain(self._ensure_brightness)

    def set_brightness(self, value: int) -> Promise:
        if self._brightness == value:
            return resolved()
        if self._proxy is None:
            return rejected(ValueError("Proxy is null"))
        return self._proxy.set_property(BRIGHTNESS_PROPERTY, value)

    @property
    def brightness(self) -> int:
        return self._brightness

    def _set_proxy(self, proxy: BusProxy | None) -> None:
        if self._proxy is proxy:
            return
        if self._proxy is not None:
            self._proxy.properties_changed.disconnect(
                self._on_properties_changed)
        self._proxy = proxy
        if proxy is not None:
            proxy.properties_changed.connect(self._on_properties_changed)
            self._update_brightness()

    def _on_properties_changed(self, *_args: Any) -> None:
        self._update_brightness()

    def _update_brightness(self) -> None:
        value = self._proxy.get_cached_property(BRIGHTNESS_PROPERTY)
        if value is not None:
            self._set_brightness(int(value))

    def _set_brightness(self, value: int) -> None:
        if self._brightness == value:
            return
        self._brightness = value
        self.brightness_changed()

    def _ensure_proxy(self) -> Promise:
        if self._proxy is not None:
            return resolved()
        return _new_proxy(self._proxy_factory).chain(self._set_proxy)

    def _ensure_brightness(self) -> Promise:
        if self._brightness >= 0:
            return resolved()

        _logger.debug("Brightness missing, waiting for it")

        result = Result()
        promise = Promise(result)

        def on_changed() -> None:
            self.brightness_changed.disconnect(on_changed)
            result.resolve()

        self.brightness_changed.connect(on_changed)
        return promise