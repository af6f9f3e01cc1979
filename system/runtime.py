import asyncio
import threading
from typing import Optional

from system.log_utils import debug, warn


class AsyncRuntime:
    """
    Dedicated thread running the board's asyncio loop.
    Flask threads hand coroutines over with submit()/call().
    """

    def __init__(self):
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._engine_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._loop is not None and self._thread is not None and self._thread.is_alive()

    def start(self, engine=None):
        with self._lock:
            if self._thread:
                return

            self._ready.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(engine,),
                daemon=True,
                name="BoardRuntime",
            )
            self._thread.start()
            self._ready.wait()

    def _run_loop(self, engine):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop

        if engine is not None:
            self._engine_task = loop.create_task(engine.run())
        self._ready.set()

        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            debug("[RUNTIME] loop closed")

    def submit(self, coro):
        """Fire and forget. Returns the concurrent future, or None when not started."""
        if not self._loop:
            warn("[RUNTIME] board runtime not started")
            coro.close()
            return None
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call(self, coro, timeout: Optional[float] = None):
        """Run `coro` on the board loop and wait for its result (or exception)."""
        if not self._loop:
            coro.close()
            raise RuntimeError("Board runtime not started")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def shutdown(self, engine=None):
        with self._lock:
            if not self._loop:
                return

            loop = self._loop

            async def _shutdown():
                if engine is not None:
                    await engine.shutdown()
                loop.stop()

            asyncio.run_coroutine_threadsafe(_shutdown(), loop)
            self._thread.join(timeout=3)

            self._loop = None
            self._thread = None
            self._engine_task = None
