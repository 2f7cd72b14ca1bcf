"""Ties the light sensor, the filter and the screen brightness together."""

from __future__ import annotations

import math

from .adapter import Adapter
from .brightness import BrightnessSource
from .filter import DebugInfo, PressureFilter
from .logger import Level, Logger
from .promise import Promise
from .sensor import SensorProxy, Unit
from .settings import Settings, SettingsStore

_logger = Logger("[Autobright]", Level.DEFAULT)


def _normalize_lux(lux: float) -> int:
    if lux < 1:
        return 0
    return int(math.floor(math.log10(lux) / 3 * 100 + 0.5))


def normalize_light_level(light_level: float, unit: Unit) -> int:
    """Bring a light reading onto the 0..100 scale.

    Vendor readings are taken as they are; lux readings are mapped
    logarithmically, 1 lux and below being 0 and 1000 lux being 100.
    """
    if unit == Unit.VENDOR:
        return int(light_level)
    if unit == Unit.LUX:
        return _normalize_lux(light_level)
    raise ValueError("Unknown unit")


class Autobright:
    """Adjusts the brightness to the ambient light.

    Each light reading is normalized, filtered and handed to the adapter,
    which writes ``value + offset`` as the brightness.  The offset is kept
    in ``store`` when one is given.
    """

    def __init__(
        self,
        brightness: BrightnessSource,
        sensor: SensorProxy,
        store: SettingsStore | None = None,
    ) -> None:
        self._brightness = brightness
        self._adapter = Adapter(brightness)
        self._settings = Settings(self._adapter, store)
        self._sensor = sensor
        self._filter = PressureFilter()
        self._normalized = 0
        self.light_level_changed = sensor.light_level_changed
        self.brightness_changed = brightness.brightness_changed
        sensor.light_level_changed.connect(self._on_light_level_changed)

    @property
    def adapter(self) -> Adapter:
        return self._adapter

    def connect(self) -> Promise:
        """Connect the brightness source, then the sensor."""

        def start_sensor(*_args: object) -> Promise:
            self._filter.set_value(self._adapter.value)
            return self._sensor.connect()

        return self._brightness.connect().chain(start_sensor)

    def update_debug_info(self, info: DebugInfo) -> None:
        info.unit = int(self._sensor.unit)
        info.light_level = self._sensor.light_level
        info.normalized = self._normalized
        info.value = self._adapter.value
        info.offset = self._adapter.offset
        info.brightness = self._brightness.brightness
        self._filter.update_debug_info(info)
        update = getattr(self._brightness, "update_debug_info", None)
        if update is not None:
            update(info)

    def close(self) -> None:
        """Stop reacting to the sensor and release the adapter and settings."""
        self._sensor.light_level_changed.disconnect(self._on_light_level_changed)
        self._settings.close()
        self._adapter.close()

    def _on_light_level_changed(self) -> None:
        if not self._sensor.has_unit():
            return
        light_level = self._sensor.light_level
        normalized = normalize_light_level(light_level, self._sensor.unit)
        self._normalized = normalized
        filtered = self._filter.filter(normalized)
        self._adapter.value = filtered
        _logger.debug(f"Light Level Changed: {light_level}, "
                      f"normalized: {normalized}, filtered: {filtered}")