"""Helpers for invoking user-supplied handler callbacks."""

import inspect
from collections.abc import Callable
from typing import Any


async def call_handler(callback: Callable[..., Any], *args: Any) -> Any:
    """Call `callback` with `args`, awaiting the result if it is awaitable.

    Lets applications register either plain functions or coroutine functions
    as capability handlers.
    """
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def handler_name(fn: Callable[..., Any]) -> str:
    """Return a readable name for a handler, for log messages."""
    if hasattr(fn, "__qualname__"):
        return fn.__qualname__
    if hasattr(fn, "func") and hasattr(fn.func, "__name__"):
        return fn.func.__name__
    return repr(fn)
