"""
Cross-view refresh signal.

Screens that change cash (visit registration, the expense list,
the cash drawer itself) and screens that show it do not hold
references to each other. Instead they share one RefreshSignal:
mutators bump it after a successful write and viewers re-fetch
when it moves. The signal carries no data, only "something
changed".

One signal lives for one operator session. It starts at 0, is
never persisted, and reset() ends the session.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[int], None]


class RefreshSignal:

    def __init__(self):
        self._version = 0
        self._subscribers: list[Subscriber] = []

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def bump(self, reason: str = "") -> int:
        """
        Advance the version and notify every subscriber.

        A failing subscriber is logged and skipped; the others are
        still notified.
        """
        self._version += 1
        logger.debug("Refresh signal -> %s (%s)", self._version, reason)
        for callback in list(self._subscribers):
            try:
                callback(self._version)
            except Exception:
                logger.exception(
                    "Refresh subscriber %r failed at version %s",
                    callback, self._version,
                )
        return self._version

    def reset(self) -> None:
        self._version = 0
        self._subscribers.clear()
