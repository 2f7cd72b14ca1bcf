"""Retry a promise-returning operation with exponential backoff."""

from __future__ import annotations

import threading
from typing import Any, Callable

from .promise import Promise, Result, rejected, resolved

Scheduler = Callable[[int, Callable[[], Any]], Any]


def _timer_schedule(delay_ms: int, callback: Callable[[], Any]) -> None:
    timer = threading.Timer(delay_ms / 1000, callback)
    timer.daemon = True
    timer.start()


def _invoke(fn: Callable[[], Any]) -> Promise:
    try:
        ret = fn()
    except Exception as exc:
        return rejected(exc)
    if isinstance(ret, Promise):
        return ret
    return resolved() if ret is None else resolved(ret)


def retry(
    fn: Callable[[], Any],
    backoff: int = 1000,
    factor: float = 2,
    retries: int = 3,
    scheduler: Scheduler | None = None,
) -> Promise:
    """Call ``fn`` until its promise resolves or the retries run out.

    After a rejection, the next attempt is scheduled ``backoff`` milliseconds
    later and the backoff is multiplied by ``factor``.  When no retries are
    left, the returned promise is rejected with the last exception.  An
    exception raised by ``fn`` itself counts as a rejection.  ``scheduler``
    is called with a delay in milliseconds and a callback; by default a
    timer thread runs the callback.
    """
    schedule = scheduler or _timer_schedule
    result = Result()
    promise = Promise(result)

    def attempt(delay: int, left: int) -> None:
        def on_rejected(exc: BaseException) -> None:
            if left > 0:
                schedule(delay, lambda: attempt(int(delay * factor), left - 1))
            else:
                result.reject(exc)

        _invoke(fn).then(result.resolve, on_rejected)

    attempt(backoff, retries)
    return promise