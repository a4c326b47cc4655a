from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Coroutine
from typing import Any, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncRunner:
    """Event loop on a daemon thread that synchronous callers submit coroutines to.

    ``run`` blocks the calling thread until the coroutine finishes; other
    threads keep working, and the loop itself never touches the database lock
    while waiting on the network.
    """

    def __init__(self, name: str = "taskmirror-remote") -> None:
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is not None and self._loop.is_running():
                return self._loop

            ready = threading.Event()
            loop = asyncio.new_event_loop()

            def runner() -> None:
                asyncio.set_event_loop(loop)
                loop.call_soon(ready.set)
                try:
                    loop.run_forever()
                finally:
                    loop.close()

            thread = threading.Thread(target=runner, name=self._name, daemon=True)
            thread.start()
            if not ready.wait(timeout=5.0):
                raise RuntimeError("Remote I/O loop did not start")
            self._loop = loop
            self._thread = thread
            logger.debug("Remote I/O loop started thread=%s", self._name)
            return loop

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        loop = self._ensure_started()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        return future.result(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=5.0)
        logger.debug("Remote I/O loop stopped thread=%s", self._name)


_default_runner: Optional[AsyncRunner] = None
_default_lock = threading.Lock()


def get_runner() -> AsyncRunner:
    global _default_runner
    with _default_lock:
        if _default_runner is None:
            _default_runner = AsyncRunner()
        return _default_runner
