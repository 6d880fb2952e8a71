"""Helpers for building already-settled futures."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

T = TypeVar("T")


def fulfilled(value: T) -> Future[T]:
    future: Future[T] = Future()
    future.set_result(value)
    return future


def rejected(exc: BaseException) -> Future[Any]:
    future: Future[Any] = Future()
    future.set_exception(exc)
    return future


def settle(fn: Callable[..., T], *args: Any) -> Future[T]:
    """Run `fn` now and capture its outcome in a settled future."""

    future: Future[T] = Future()
    try:
        result = fn(*args)
    except Exception as exc:
        future.set_exception(exc)
    else:
        future.set_result(result)
    return future
