"""
Internal utility functions for lakelevel.
"""

import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    TypeVar,
    get_type_hints,
)

R = TypeVar("R")


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    A decorator that adds a .sync attribute to an async function, allowing it
    to be called synchronously.

    The .sync version runs the async function in a new asyncio event loop and,
    if the function takes a `transport` argument, supplies a temporary one.

    Example:
        >>> @add_sync_version
        ... async def my_async_func(x):
        ...     return x * 2

        >>> # Async usage
        >>> result = await my_async_func(5)

        >>> # Sync usage
        >>> result = my_async_func.sync(5)
    """
    # Import here to avoid circular imports
    from .sync import AsyncSyncBridge

    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        """Synchronous wrapper for the async function."""
        transport_class = None
        if "transport" in inspect.signature(async_fn).parameters:
            hints = get_type_hints(async_fn)
            transport_class = AsyncSyncBridge.extract_transport_class(
                hints.get("transport")
            )

        return AsyncSyncBridge.run_async(
            async_fn, args=args, kwargs=kwargs, transport_class=transport_class
        )

    # Attach the synchronous wrapper to the original async function
    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn
