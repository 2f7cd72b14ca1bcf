"""Keeps the adapter's brightness offset in step with a settings store."""

from __future__ import annotations

from typing import Any, Mapping

from .adapter import Adapter
from .signals import Signal

OFFSET_KEY = "offset"


class SettingsStore:
    """An in-memory store of integer settings.

    ``changed`` is emitted with the key whenever a stored value changes.
    """

    def __init__(self, values: Mapping[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(values or {})
        self.changed = Signal()

    def get_int(self, key: str) -> int:
        """The value stored under ``key``; KeyError when there is none."""
        return int(self._values[key])

    def set_int(self, key: str, value: int) -> None:
        """Store ``value`` under ``key``, notifying listeners on change."""
        value = int(value)
        if self._values.get(key) == value:
            return
        self._values[key] = value
        self.changed(key)


class Settings:
    """Binds the ``offset`` setting to the adapter's offset, both ways.

    The stored offset is applied to the adapter at once.  Without a store
    nothing is bound.
    """

    def __init__(self, adapter: Adapter, store: SettingsStore | None) -> None:
        self._adapter = adapter
        self._store = store
        if store is None:
            return
        store.changed.connect(self._on_changed)
        self._read_offset()
        adapter.offset_changed.connect(self._write_offset)

    def close(self) -> None:
        """Stop keeping the store and the adapter in step."""
        if self._store is None:
            return
        self._adapter.offset_changed.disconnect(self._write_offset)
        self._store.changed.disconnect(self._on_changed)

    def _on_changed(self, key: Any) -> None:
        if key == OFFSET_KEY:
            self._read_offset()

    def _read_offset(self) -> None:
        self._adapter.offset = self._store.get_int(OFFSET_KEY)

    def _write_offset(self) -> None:
        self._store.set_int(OFFSET_KEY, self._adapter.offset)