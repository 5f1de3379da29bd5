"""Error containment for analytics entry points."""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def safe_fallback(
    default: Callable[[], T],
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Wrap an async entry point so any ``Exception`` becomes ``default()``.

    The failure is logged at ERROR with the operation name and call
    arguments. ``default`` is called per failure so callers never share a
    mutable fallback value. Cancellation is not caught.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                # args[0] is the data source
                call_args = [repr(a) for a in args[1:]] + [f"{k}={v!r}" for k, v in kwargs.items()]
                logger.error(f"{operation} failed ({', '.join(call_args)}): {e}", exc_info=True)
                return default()

        return wrapper

    return decorator
