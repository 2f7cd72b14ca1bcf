"""Signals: ordered handler lists that can be changed while they are emitted."""

from __future__ import annotations

import inspect
from typing import Any, Callable, Iterator


class _Node:
    __slots__ = ("handler", "next")

    def __init__(self, handler: Callable[..., Any]) -> None:
        self.handler = handler
        self.next: _Node | None = None


def _matches(handler: Callable[..., Any], handle: Any) -> bool:
    if handler is handle:
        return True
    # Bound methods are recreated on every attribute access.
    return inspect.ismethod(handler) and handler == handle


class Signal:
    """An ordered set of handlers called on emission.

    Handlers may disconnect themselves, or others, while the signal is being
    emitted: a handler disconnected before its turn is not called, and the
    emission carries on with the handlers after it.
    """

    def __init__(self) -> None:
        self._head: _Node | None = None
        self._tail: _Node | None = None

    def _nodes(self) -> Iterator[_Node]:
        node = self._head
        while node is not None:
            yield node
            node = node.next

    def connect(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Append ``handler``; the handler itself is the handle to remove it."""
        node = _Node(handler)
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        return handler

    def disconnect(self, handle: Any) -> bool:
        """Remove the first handler matching ``handle``; return whether found."""
        prev: _Node | None = None
        for node in self._nodes():
            if _matches(node.handler, handle):
                # The removed node keeps its link so a running emission
                # positioned on it still reaches the following handlers.
                if prev is None:
                    self._head = node.next
                else:
                    prev.next = node.next
                if self._tail is node:
                    self._tail = prev
                return True
            prev = node
        return False

    def emit(self, *args: Any) -> None:
        """Call every handler in order with ``args``."""
        for node in self._nodes():
            node.handler(*args)

    def __call__(self, *args: Any) -> None:
        self.emit(*args)

    def handlers(self) -> list[Callable[..., Any]]:
        """The connected handlers, in order."""
        return [node.handler for node in self._nodes()]