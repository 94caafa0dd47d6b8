"""Roster-refreshed event channel.

Lets UI layers recompute when the engine has observed a new roster,
without polling. Publishing is synchronous and push-based.
"""

import logging
from collections.abc import Callable

from src.core.schemas import Job

logger = logging.getLogger(__name__)

RosterListener = Callable[[Job], None]


class RosterEvents:
    """Subscriber list for "roster refreshed" notifications.

    After ``close()`` nothing is delivered, including to listeners that were
    subscribed before teardown.
    """

    def __init__(self) -> None:
        self._listeners: list[RosterListener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: RosterListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, job: Job) -> None:
        if self._closed:
            return
        for listener in list(self._listeners):
            try:
                listener(job)
            except Exception:
                logger.warning("Roster listener %r failed", listener, exc_info=True)

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()
