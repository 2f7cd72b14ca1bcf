"""A pressure filter that moves its value only after sustained change."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class DebugInfo:
    """A snapshot of the internal state, for diagnostics."""

    unit: int = 0
    light_level: float = 0.0
    normalized: int = 0
    pressure: float = 0.0
    filtered: int = 0
    value: int = 0
    offset: int = 0
    brightness: int = 0
    flags: int = 0


def _round(x: float) -> int:
    """Round half away from zero."""
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


class PressureFilter:
    """Smooths a stream of values in the range 0..100.

    Readings on one side of the current value build up pressure, more for
    larger and brighter differences; a reading on the other side, or equal
    to the value, releases it.  Once the pressure reaches one, the value
    jumps to the weighted mean of the readings that built it up.
    """

    def __init__(self) -> None:
        self._value = 0
        self._pressure = 0.0
        self._vp_sum = 0.0
        self._vp_num = 0.0

    @property
    def value(self) -> int:
        return self._value

    @property
    def pressure(self) -> float:
        return self._pressure

    def set_value(self, value: int) -> None:
        self._value = value

    def filter(self, value: int) -> int:
        """Feed one reading and return the filtered value."""
        if value > self._value and self._pressure >= 0:
            self._add_value(value)
            if self._pressure >= 1:
                self._value = self._mid_value()
                self._reset()
        elif value < self._value and self._pressure <= 0:
            self._add_value(value)
            if self._pressure <= -1:
                self._value = self._mid_value()
                self._reset()
        else:
            self._reset()
        return self._value

    def update_debug_info(self, info: DebugInfo) -> None:
        info.pressure = self._pressure
        info.filtered = self._value

    def _add_value(self, value: int) -> None:
        d = value - self._value
        if d > 0:
            self._pressure += (d * d * 0.01) * (value * 0.01)
        elif d < 0:
            self._pressure -= (d * d * 0.01) * (self._value * 0.01)
        self._vp_sum += value * 0.01
        self._vp_num += 0.01

    def _mid_value(self) -> int:
        return _round(self._vp_sum / self._vp_num) if self._vp_num else 0

    def _reset(self) -> None:
        self._pressure = 0.0
        self._vp_sum = 0.0
        self._vp_num = 0.0