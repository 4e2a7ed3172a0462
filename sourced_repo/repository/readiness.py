import asyncio
from collections.abc import Awaitable, Callable, Generator
from typing import Any


def _retrieve_exception(future: "asyncio.Future[None]") -> None:
    # Marks a failure as seen when nothing ever waits on the signal
    if not future.cancelled():
        future.exception()


class ReadinessSignal:
    """A one-shot gate awaited before a component touches its storage.

    The initializer runs at most once. When the signal is created inside a
    running event loop it starts right away; otherwise it starts on the first
    wait. Every waiter shares the same outcome, and once the initializer has
    finished, waiting returns (or re-raises its error) without suspending.
    A failure nobody waits for is not reported as an unretrieved task
    exception; it surfaces on the next wait.

    Examples:
        >>> ready = ReadinessSignal(create_indexes)
        >>> await ready          # runs create_indexes() once
        >>> await ready.wait()   # returns immediately
    """

    __slots__ = ("_initializer", "_future")

    def __init__(self, initializer: Callable[[], Awaitable[None]]) -> None:
        self._initializer = initializer
        self._future: asyncio.Future[None] | None = None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._start()

    def _start(self) -> "asyncio.Future[None]":
        if self._future is None:
            self._future = asyncio.ensure_future(self._initializer())
            self._future.add_done_callback(_retrieve_exception)
        return self._future

    @property
    def started(self) -> bool:
        return self._future is not None

    @property
    def resolved(self) -> bool:
        """True once the initializer has finished successfully."""
        future = self._future
        return (
            future is not None
            and future.done()
            and not future.cancelled()
            and future.exception() is None
        )

    async def wait(self) -> None:
        """Wait for the initializer to finish.

        Raises:
            Exception: Whatever the initializer raised, on every wait.
        """
        future = self._start()
        if future.done():
            future.result()
            return
        # A cancelled waiter must not cancel the shared initialization
        await asyncio.shield(future)

    def __await__(self) -> Generator[Any, None, None]:
        return self.wait().__await__()
