"""
Delayed session transitions owned by the caller (auto-advance after a Write
answer, clearing a Match mismatch flash).

A timer only fires if the session has not been restarted since it was
scheduled; restarting bumps the session's epoch.
"""
import asyncio
from typing import Callable, Dict, Optional, Protocol

from loguru import logger


class HasEpoch(Protocol):
    epoch: int


class TransitionTimer:
    def __init__(self):
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, name: str, delay_ms: int, session: HasEpoch, callback: Callable[[], None]) -> None:
        """Run callback after delay_ms on the running loop, replacing any pending timer of that name"""
        self.cancel(name)
        loop = asyncio.get_running_loop()
        epoch = session.epoch

        def fire() -> None:
            self._handles.pop(name, None)
            if session.epoch != epoch:
                logger.debug(f"Dropping stale '{name}' transition (epoch {epoch} -> {session.epoch})")
                return
            callback()

        self._handles[name] = loop.call_later(delay_ms / 1000, fire)

    def is_pending(self, name: str) -> bool:
        return name in self._handles

    def cancel(self, name: Optional[str] = None) -> None:
        """Cancel one pending transition, or all of them when name is None"""
        names = list(self._handles) if name is None else [name]
        for key in names:
            handle = self._handles.pop(key, None)
            if handle is not None:
                handle.cancel()
