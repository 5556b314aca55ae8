"""In-process change notifications.

Views that keep a copy of the lead list subscribe to ``leads_changed`` and
re-fetch when it fires. Delivery is synchronous and best effort: nothing is
queued and late subscribers do not see earlier signals.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Signal:
    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Listener:
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, **payload: Any) -> None:
        # Copy so a listener may unsubscribe itself while handling the signal
        for listener in list(self._listeners):
            try:
                listener(**payload)
            except Exception:
                logger.exception("Listener %r failed while handling %s", listener, self.name)

    @property
    def listeners(self) -> List[Listener]:
        return list(self._listeners)


leads_changed = Signal("leads-updated")
