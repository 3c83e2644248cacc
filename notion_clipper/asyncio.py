import asyncio
from typing import Any

from notion_clipper.http_async import close_session


def run_async(coro) -> Any:
    """Run an async coroutine from sync code, closing the shared session afterwards.

    Raises:
        RuntimeError: called while an event loop is already running in this
            thread (await the coroutine there instead).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        coro.close()
        raise RuntimeError("run_async() cannot be called from a running event loop; await the coroutine instead")

    async def run_and_close():
        try:
            return await coro
        finally:
            await close_session()
    return asyncio.run(run_and_close())
