"""
Synchronous wrappers for lakelevel's async helpers.

Usage:
    # Instead of this async code:
    async with USGSTransport() as transport:
        result = await get_lake_level("02169500", "P30D", transport=transport)

    # Use this sync code:
    result = get_lake_level.sync("02169500", "P30D")
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union, get_args, get_origin

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async functions to completion from synchronous code.

    When the wrapped function takes a `transport` argument and none is given,
    a temporary one is created and closed afterwards.
    """

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        transport_class: Optional[type] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function
            transport_class: Optional transport class to instantiate if not provided

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within an existing event loop
        """
        if kwargs is None:
            kwargs = {}

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        temp_transport = None
        sig = inspect.signature(async_fn)
        if transport_class and "transport" in sig.parameters:
            bound = sig.bind_partial(*args, **kwargs)
            if bound.arguments.get("transport") is None:
                # Build the temporary transport from the caller's config, if any
                config = bound.arguments.get("config")
                if config is not None:
                    temp_transport = transport_class(config)
                else:
                    temp_transport = transport_class()
                bound.arguments["transport"] = temp_transport
                args, kwargs = bound.args, bound.kwargs

        async def _call_and_cleanup() -> R:
            try:
                return await async_fn(*args, **kwargs)
            finally:
                if temp_transport is not None:
                    await temp_transport.aclose()

        return asyncio.run(_call_and_cleanup())

    @staticmethod
    def extract_transport_class(annotation: Any) -> Optional[type]:
        """Extract a concrete class from an annotation such as Optional[USGSTransport]."""
        if annotation is None or annotation is inspect.Parameter.empty:
            return None

        if get_origin(annotation) is Union:
            non_none_args = [arg for arg in get_args(annotation) if arg is not type(None)]
            if non_none_args and isinstance(non_none_args[0], type):
                return non_none_args[0]
            return None

        if isinstance(annotation, type):
            return annotation
        return None
