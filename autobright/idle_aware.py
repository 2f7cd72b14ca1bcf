"""A brightness source that steps aside while the user is idle."""

from __future__ import annotations

import enum
import threading
from typing import Any, Callable

from .brightness import BrightnessProxy, BrightnessSource
from .filter import DebugInfo
from .idle_monitor import IdleMonitorProxy, Watch
from .logger import Logger
from .promise import Promise, log_exception, resolved

Scheduler = Callable[[int, Callable[[], Any]], Any]

_logger = Logger("[IdleAware]")


class Flags(enum.IntFlag):
    NONE = 0
    IDLE = 1 << 0
    INACTIVE = 1 << 1
    DISABLED = 1 << 2


def _flags_to_string(flags: Flags) -> str:
    if not flags:
        return "NONE"
    names = [flag.name for flag in (Flags.IDLE, Flags.INACTIVE, Flags.DISABLED)
             if flags & flag]
    return ",".join(names)


def _timer_schedule(delay_ms: int, callback: Callable[[], Any]) -> None:
    timer = threading.Timer(delay_ms / 1000, callback)
    timer.daemon = True
    timer.start()


class IdleAware(BrightnessSource):
    """Wraps a brightness source and the idle monitor.

    While the user is idle, brightness changes made by someone else (such
    as the screen being dimmed) are not reported.  If the brightness at the
    time the user goes inactive differs from the one last requested, the
    wrapper disables itself and stops writing the brightness, until the user
    is active again, when the requested brightness is restored.
    ``scheduler`` is called with a delay in milliseconds and a callback; by
    default a timer thread runs the callback.
    """

    IDLE_INTERVAL = 5000
    INACTIVE_TIMEOUT = 500

    def __init__(
        self,
        brightness_proxy: BrightnessSource,
        idle_monitor: IdleMonitorProxy,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__()
        self._proxy = brightness_proxy
        self._idle_monitor = idle_monitor
        self._schedule = scheduler or _timer_schedule
        self._brightness = -1
        self._flags = Flags.NONE
        self._idle_watch_id: Watch | None = None
        self._inactive_count = 0
        self.idle_interval = self.IDLE_INTERVAL
        self.inactive_timeout = self.INACTIVE_TIMEOUT
        self._proxy.brightness_changed.connect(self._on_brightness_changed)

    @staticmethod
    def ping_service(
        brightness_factory: Callable[..., Promise],
        monitor_factory: Callable[..., Promise],
    ) -> Promise:
        """Ensure both the power and the idle monitor services exist."""
        return BrightnessProxy.ping_service(brightness_factory).chain(
            lambda: IdleMonitorProxy.ping_service(monitor_factory))

    @property
    def flags(self) -> Flags:
        return self._flags

    def connect(self) -> Promise:
        return (
            self._proxy.connect()
            .chain(lambda *_: self._idle_monitor.connect())
            .chain(lambda *_: self._add_idle_watch())
        )

    def set_brightness(self, value: int) -> Promise:
        _logger.log(f"Setting brightness: {value}, current: {self._brightness}, "
                    f"flags: {_flags_to_string(self._flags)}")
        self._brightness = value
        if self._flags & Flags.DISABLED:
            return resolved()
        return self._proxy.set_brightness(value)

    @property
    def brightness(self) -> int:
        return self._proxy.brightness

    def update_debug_info(self, info: DebugInfo) -> None:
        info.flags = int(self._flags)

    def close(self) -> None:
        """Stop following the brightness source and remove all watches."""
        self._proxy.brightness_changed.disconnect(self._on_brightness_changed)
        self._idle_monitor.remove_all().grab(log_exception("IdleAware.close"))

    def _add_idle_watch(self) -> Promise:
        if self._idle_watch_id is not None:
            return resolved()

        def on_added(watch_id: Watch) -> None:
            # a concurrent call may have registered a watch meanwhile
            if self._idle_watch_id is not None:
                self._idle_monitor.remove_watch(watch_id).grab(
                    log_exception("IdleAware._add_idle_watch"))
            else:
                self._idle_watch_id = watch_id

        return self._idle_monitor.add_idle_watch(
            self.idle_interval, self._on_idle).chain(on_added)

    def _on_brightness_changed(self) -> None:
        _logger.log(f"Brightness changed: {self._proxy.brightness}, "
                    f"current: {self._brightness}, "
                    f"flags: {_flags_to_string(self._flags)}")
        if self._flags == Flags.IDLE:
            self._update_async().grab(
                log_exception("IdleAware._on_brightness_changed"))
        else:
            self._update_brightness()

    def _on_active(self) -> None:
        self._flags = Flags.NONE
        _logger.log(f"Active, brightness: {self._brightness}")
        self._proxy.set_brightness(self._brightness).grab(
            log_exception("IdleAware._on_active"))

    def _on_idle(self) -> None:
        self._flags |= Flags.IDLE

    def _update_async(self) -> Promise:
        return (
            self._update_idle()
            .chain(lambda *_: self._update_inactive())
            .chain(lambda *_: self._update_brightness())
        )

    def _update_idle(self) -> Promise:
        if self._flags != Flags.IDLE:
            return resolved()

        def on_idle_time(idle_time: int) -> None:
            if idle_time < self.idle_interval:
                self._flags = Flags.NONE
            else:
                _logger.log(f"Idle, time: {idle_time}")

        return self._idle_monitor.get_idle_time().chain(on_idle_time)

    def _update_inactive(self) -> Promise:
        if self._flags != Flags.IDLE:
            return resolved()

        self._inactive_count += 1

        def on_added(*_args: Any) -> None:
            self._flags |= Flags.INACTIVE
            _logger.log(f"Inactive, count: {self._inactive_count}")

        return self._idle_monitor.add_user_active_watch(
            lambda: self._schedule(self.inactive_timeout, self._on_active)
        ).chain(on_added)

    def _update_brightness(self) -> None:
        if self._flags & Flags.DISABLED:
            return

        if (self._flags & Flags.INACTIVE
                and self._brightness != self._proxy.brightness):
            self._flags |= Flags.DISABLED
            _logger.log("Disabled")
            return

        self._brightness = self._proxy.brightness
        self.brightness_changed()