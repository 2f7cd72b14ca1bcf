"""Thread-safe promises with chaining, flattening and error propagation.

A promise settles once, either resolved (with no value or exactly one value)
or rejected with an exception.  Handlers registered on a pending promise run
in registration order when it settles; handlers registered on an already
settled promise run immediately.
"""

from __future__ import annotations

import enum
import sys
import threading
from collections import deque
from typing import Any, Callable, Iterable


class _Status(enum.Enum):
    PENDING = enum.auto()
    SUCCESS = enum.auto()
    FAILURE = enum.auto()


class _State:
    """Shared settlement state behind a promise and its results."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._status = _Status.PENDING
        self._handled = False
        self._value: tuple = ()
        self._error: BaseException | None = None
        self._on_resolved: deque[Callable[..., Any]] = deque()
        self._on_rejected: deque[Callable[[BaseException], Any]] = deque()

    def resolve(self, *args: Any) -> None:
        if len(args) > 1:
            raise TypeError("A promise resolves with at most one value")
        with self._lock:
            if self._status is not _Status.PENDING:
                return
            self._value = args
            self._status = _Status.SUCCESS
        self._on_rejected.clear()
        while self._on_resolved:
            self._on_resolved.popleft()(*args)

    def reject(self, exception: BaseException) -> None:
        with self._lock:
            if self._status is not _Status.PENDING:
                return
            self._error = exception
            self._status = _Status.FAILURE
        self._on_resolved.clear()
        while self._on_rejected:
            self._on_rejected.popleft()(exception)

    def when_resolved(self, callback: Callable[..., Any]) -> None:
        with self._lock:
            if self._status is _Status.PENDING:
                self._on_resolved.append(callback)
                return
            if self._status is not _Status.SUCCESS:
                return
        callback(*self._value)

    def when_rejected(self, callback: Callable[[BaseException], Any]) -> None:
        with self._lock:
            self._handled = True
            if self._status is _Status.PENDING:
                self._on_rejected.append(callback)
                return
            if self._status is not _Status.FAILURE:
                return
        callback(self._error)

    def __del__(self) -> None:
        if self._status is _Status.FAILURE and not self._handled:
            try:
                sys.stderr.write(
                    f"Uncaught promise exception: {self._error}\n")
            except Exception:
                pass


def _settle(state: _State, fn: Callable[..., Any], args: tuple) -> None:
    """Run ``fn`` and settle ``state`` with its outcome, flattening promises."""
    try:
        ret = fn(*args)
    except Exception as exc:
        state.reject(exc)
        return
    if isinstance(ret, Promise):
        ret._forward_to(state)
    elif ret is None:
        state.resolve()
    else:
        state.resolve(ret)


class Result:
    """The settling side of a promise."""

    def __init__(self) -> None:
        self._state: _State | None = None

    def _ensure_state(self) -> _State:
        if self._state is None:
            raise RuntimeError("No state")
        return self._state

    def resolve(self, *args: Any) -> None:
        """Resolve the bound promise with no value or with one value."""
        self._ensure_state().resolve(*args)

    def reject(self, exception: BaseException) -> None:
        """Reject the bound promise with ``exception``."""
        self._ensure_state().reject(exception)

    def has_state(self) -> bool:
        """Whether this result is bound to a promise."""
        return self._state is not None


class Promise:
    """A value, or a failure, that becomes available later.

    ``source`` may be a :class:`Result` to bind, an executor called at once
    with a fresh :class:`Result`, or another promise whose outcome this one
    adopts.  Without a source the promise stays pending.
    """

    def __init__(self, source: Any = None) -> None:
        self._state = _State()
        if source is None:
            return
        if isinstance(source, Result):
            source._state = self._state
        elif isinstance(source, Promise):
            source._forward_to(self._state)
        elif callable(source):
            result = Result()
            result._state = self._state
            try:
                source(result)
            except Exception as exc:
                result.reject(exc)
        else:
            raise TypeError(f"Cannot build a promise from {source!r}")

    def _forward_to(self, state: _State) -> None:
        self._state.when_resolved(state.resolve)
        self._state.when_rejected(state.reject)

    def then(
        self,
        on_resolved: Callable[..., Any],
        on_rejected: Callable[[BaseException], Any] | None = None,
    ) -> Promise:
        """Register handlers; the returned promise settles with their outcome.

        Without ``on_rejected`` a rejection is not passed on: the returned
        promise then stays pending.
        """
        other = Promise()
        self._state.when_resolved(
            lambda *args: _settle(other._state, on_resolved, args))
        if on_rejected is not None:
            self._state.when_rejected(
                lambda exc: _settle(other._state, on_rejected, (exc,)))
        return other

    def grab(self, on_rejected: Callable[[BaseException], Any]) -> Promise:
        """Register a rejection handler; its outcome settles the result."""
        other = Promise()
        self._state.when_rejected(
            lambda exc: _settle(other._state, on_rejected, (exc,)))
        return other

    def chain(self, fn: Callable[..., Any]) -> Promise:
        """Like :meth:`then`, but a rejection propagates to the result."""
        other = Promise()
        self._state.when_resolved(lambda *args: _settle(other._state, fn, args))
        self._state.when_rejected(other._state.reject)
        return other


def resolved(*args: Any) -> Promise:
    """A promise already resolved with no value or with one value."""
    result = Result()
    promise = Promise(result)
    result.resolve(*args)
    return promise


def rejected(exception: BaseException) -> Promise:
    """A promise already rejected with ``exception``."""
    result = Result()
    promise = Promise(result)
    result.reject(exception)
    return promise


def resolve_all(
    promises: Iterable[Promise],
    on_error: Callable[[BaseException], Any],
) -> Promise:
    """Resolve once every promise has settled; rejections go to ``on_error``."""
    pending = list(promises)
    result = Result()
    promise = Promise(result)
    lock = threading.Lock()
    remaining = len(pending)

    def settled() -> None:
        nonlocal remaining
        with lock:
            remaining -= 1
            done = remaining == 0
        if done:
            result.resolve()

    def on_resolved(*_args: Any) -> None:
        settled()

    def on_rejected(exc: BaseException) -> None:
        try:
            on_error(exc)
        finally:
            settled()

    if not pending:
        result.resolve()
    for item in pending:
        item.then(on_resolved, on_rejected)
    return promise


def log_exception(prefix: str) -> Callable[[BaseException], None]:
    """A rejection handler writing ``[prefix]: message`` to standard error."""

    def handler(exc: BaseException) -> None:
        message = str(exc) if isinstance(exc, BaseException) else "unknown"
        sys.stderr.write(f"[{prefix}]: {message}\n")

    return handler