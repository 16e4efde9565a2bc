import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)


class SignedUrlRefresher:
    """
    Periodically re-checks a signed URL until its stop event is set.

    The owner creates the event, runs ``run`` as a task for as long as the
    view that needs the URL stays open, and sets the event to cancel it.
    """

    def __init__(self, refresh: Callable[[], Union[None, bool, Awaitable]], interval: float):
        self.refresh = refresh
        self.interval = interval
        self.runs = 0

    async def run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                result = self.refresh()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Signed URL refresh failed: {e}")
            self.runs += 1
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
