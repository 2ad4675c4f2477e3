"""Uniform calling convention for hooks.

Theme preprocessors, processors, renderers, inline templates and element
pre/post renders may be plain functions or coroutine functions. Either way the
caller awaits the outcome.
"""

import inspect
from collections.abc import Callable
from typing import Any


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call ``hook`` and await its result if it returned an awaitable."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
