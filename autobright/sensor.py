"""Ambient light level, read from the sensor proxy service."""

from __future__ import annotations

import enum
from typing import Any, Callable

from .bus import BusProxy, ping
from .promise import Promise, Result, resolved
from .signals import Signal

BUS = "system"
SERVICE_NAME = "net.hadess.SensorProxy"
OBJECT_PATH = "/net/hadess/SensorProxy"
INTERFACE_NAME = "net.hadess.SensorProxy"
LIGHT_LEVEL_PROPERTY = "LightLevel"
UNIT_PROPERTY = "LightLevelUnit"

ProxyFactory = Callable[[str, str, str, str], Promise]


class Unit(enum.IntEnum):
    UNKNOWN = 0
    VENDOR = 1
    LUX = 2


_UNITS = {"lux": Unit.LUX, "vendor": Unit.VENDOR}


def _new_proxy(proxy_factory: ProxyFactory) -> Promise:
    return proxy_factory(BUS, SERVICE_NAME, OBJECT_PATH, INTERFACE_NAME)


class SensorProxy:
    """The ambient light sensor.

    ``light_level_changed`` is emitted, without arguments, whenever the
    light level changes.  ``proxy_factory`` is called with the bus, service
    name, object path and interface name, and returns a promise of a
    :class:`BusProxy`.
    """

    def __init__(self, proxy_factory: ProxyFactory) -> None:
        self._proxy_factory = proxy_factory
        self._proxy: BusProxy | None = None
        self._light_level = 0.0
        self._unit = Unit.UNKNOWN
        self.light_level_changed = Signal()

    @staticmethod
    def ping_service(proxy_factory: ProxyFactory) -> Promise:
        """Ensure the service exists by pinging it."""
        return _new_proxy(proxy_factory).chain(ping)

    def connect(self) -> Promise:
        """Resolve once the proxy exists and the unit is known."""
        return self._ensure_proxy().chain(self._ensure_unit)

    @property
    def light_level(self) -> float:
        return self._light_level

    @property
    def unit(self) -> Unit:
        return self._unit

    def has_unit(self) -> bool:
        return self._unit is not Unit.UNKNOWN

    def _set_proxy(self, proxy: BusProxy | None) -> None:
        if self._proxy is proxy:
            return
        if self._proxy is not None:
            self._proxy.properties_changed.disconnect(
                self._on_properties_changed)
        self._proxy = proxy
        if proxy is not None:
            proxy.properties_changed.connect(self._on_properties_changed)
            self._update_unit()
            self._update_light_level()

    def _on_properties_changed(self, *_args: Any) -> None:
        if not self.has_unit():
            self._update_unit()
        self._update_light_level()

    def _update_light_level(self) -> None:
        value = self._proxy.get_cached_property(LIGHT_LEVEL_PROPERTY)
        if value is not None:
            self._set_light_level(float(value))

    def _update_unit(self) -> None:
        value = self._proxy.get_cached_property(UNIT_PROPERTY)
        if value is not None:
            self._set_unit(str(value))

    def _set_light_level(self, value: float) -> None:
        if self._light_level == value:
            return
        self._light_level = value
        self.light_level_changed()

    def _set_unit(self, value: str) -> None:
        try:
            self._unit = _UNITS[value]
        except KeyError:
            raise ValueError(value) from None

    def _ensure_proxy(self) -> Promise:
        if self._proxy is not None:
            return resolved()
        return _new_proxy(self._proxy_factory).chain(self._set_proxy)

    def _ensure_unit(self) -> Promise:
        if self.has_unit():
            return resolved()

        result = Result()
        promise = Promise(result)

        def on_changed() -> None:
            if not self.has_unit():
                return
            self.light_level_changed.disconnect(on_changed)
            result.resolve()

        self.light_level_changed.connect(on_changed)
        return promise