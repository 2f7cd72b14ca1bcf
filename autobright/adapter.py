"""Maps a 0..100 light value plus a user offset onto screen brightness."""

from __future__ import annotations

from .brightness import BrightnessSource
from .logger import Logger
from .promise import log_exception

_logger = Logger("[Adapter]")


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class Adapter:
    """Keeps ``brightness = value + offset`` in step with a brightness source.

    Setting the value writes the brightness.  A brightness changed from
    elsewhere is taken as a new user offset once a value is known, and as
    the value otherwise.  ``offset_changed`` and ``value_changed`` are
    emitted, without arguments, when either changes.
    """

    NO_VALUE = -200

    def __init__(self, proxy: BrightnessSource) -> None:
        self._proxy = proxy
        self._offset = 0
        self._value = self.NO_VALUE
        self.offset_changed = Signal()
        self.value_changed = Signal()
        proxy.brightness_changed.connect(self._on_brightness_changed)

    def close(self) -> None:
        """Stop following the brightness source."""
        self._proxy.brightness_changed.disconnect(self._on_brightness_changed)

    @property
    def offset(self) -> int:
        return self._offset

    @offset.setter
    def offset(self, value: int) -> None:
        if self._offset != value and self._set_offset(value):
            if self._value != self.NO_VALUE:
                # the offset moved, so keep the value within range
                self._set_value(self._value)
                self._set_brightness()

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        if self._value != value and self._set_value(value):
            self._set_brightness()

    def _set_offset(self, value: int) -> bool:
        value = _clamp(value, -100, 100)
        if self._offset == value:
            return False
        self._offset = value
        self.offset_changed()
        return True

    def _set_value(self, value: int) -> bool:
        value = _clamp(value, 0 - self._offset, 100 - self._offset)
        if self._value == value:
            return False
        self._value = value
        self.value_changed()
        return True

    def _set_brightness(self) -> None:
        brightness = self._value + self._offset
        _logger.log(f"Setting brightness: {brightness}, value: {self._value}, "
                    f"offset: {self._offset}")
        self._proxy.set_brightness(brightness).grab(
            log_exception("Adapter._set_brightness"))

    def _on_brightness_changed(self) -> None:
        brightness = self._proxy.brightness
        if self._value != self.NO_VALUE:
            changed = self._set_offset(brightness - self._value)
        else:
            changed = self._set_value(brightness - self._offset)
        if changed:
            _logger.log(f"Brightness changed: {brightness}, "
                        f"value: {self._value}, offset: {self._offset}")


from .signals import Signal  # noqa: E402