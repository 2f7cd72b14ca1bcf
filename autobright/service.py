"""The service: debug state for observers, connection and main loop."""

from __future__ import annotations

import threading
from typing import Any

from .filter import DebugInfo
from .logger import Level, Logger, format_exception

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

BUS_NAME = "io.autobright.Autobright"
DEBUG_OBJECT_PATH = "/io/autobright/Autobright/Debug"

_logger = Logger("[AutobrightService]", Level.DEBUG)


class AutobrightService:
    """Runs an autobright instance and publishes its debug state.

    Debug publishing is reference counted: it is on while
    :meth:`enable_debug` has been called more often than
    :meth:`disable_debug`.  The bus owner calls :meth:`on_name_acquired` and
    :meth:`on_name_lost`; :meth:`run` blocks until :meth:`quit`.
    """

    def __init__(self, autobright: Any) -> None:
        self._autobright = autobright
        self._lock = threading.Lock()
        self._loop: threading.Event | None = None
        self._status = 0
        self._enable = 0
        self._debug_enabled = False
        self._debug = DebugInfo()
        autobright.light_level_changed.connect(self.update_debug)
        autobright.brightness_changed.connect(self.update_debug)

    @property
    def status(self) -> int:
        return self._status

    @property
    def running(self) -> bool:
        return self._loop is not None

    @property
    def enable_count(self) -> int:
        return self._enable

    @property
    def debug_enabled(self) -> bool:
        return self._debug_enabled

    @property
    def debug(self) -> DebugInfo:
        """The last published debug state."""
        return self._debug

    def enable_debug(self) -> None:
        self._enable += 1
        _logger.log(f"Debug enabled, count: {self._enable}")
        if self._enable == 1:
            self._debug_enabled = True
            self.update_debug()

    def disable_debug(self) -> None:
        if self._enable < 1:
            return
        self._enable -= 1
        _logger.log(f"Debug disabled, count: {self._enable}")
        if self._enable == 0:
            self._debug_enabled = False
            self._debug = DebugInfo()

    def update_debug(self) -> None:
        """Refresh the published debug state, while it is enabled."""
        if self._enable < 1:
            return
        info = DebugInfo()
        self._autobright.update_debug_info(info)
        self._debug = info

    def quit(self, status: int) -> None:
        """Stop the main loop; the first non-zero status is kept."""
        with self._lock:
            if not self._status:
                self._status = status
            loop = self._loop
        if loop is not None:
            loop.set()

    def on_name_acquired(self) -> None:
        _logger.log(f"[{BUS_NAME}] name acquired")

        def on_connected(*_args: Any) -> None:
            _logger.log("Connected")

        def on_error(exc: BaseException) -> None:
            _logger.error(f"Error connecting: {format_exception(exc)}")
            self.quit(EXIT_FAILURE)

        self._autobright.connect().then(on_connected, on_error)

    def on_name_lost(self) -> None:
        _logger.log(f"[{BUS_NAME}] name lost")
        self.quit(EXIT_FAILURE)

    def run(self) -> int:
        """Block until :meth:`quit`, then return the status.

        Returns the failure status at once if already running.
        """
        with self._lock:
            if self._loop is not None:
                return EXIT_FAILURE
            loop = self._loop = threading.Event()
        loop.wait()
        with self._lock:
            self._loop = None
        return self._status

    def close(self) -> None:
        """Stop following the autobright instance."""
        self._autobright.light_level_changed.disconnect(self.update_debug)
        self._autobright.brightness_changed.disconnect(self.update_debug)