"""Await-if-needed call for mount hooks.

``run_mount_hooks`` accepts plain functions and coroutine functions in the
same chain; both go through ``invoke``::

    from roost._internal.invoke import invoke

    await invoke(live_user_required, ctx, "user")
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
