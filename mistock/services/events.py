import logging
from typing import Awaitable, Callable, Dict, List, Type

logger = logging.getLogger(__name__)

Handler = Callable[[object], Awaitable[None]]


class EventBus:
    """
    In-process publish/subscribe keyed by event type.

    Handlers run in subscription order and are awaited before ``publish``
    returns. A failing handler propagates to the publisher.
    """

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = {}

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    async def publish(self, event: object) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            await handler(event)
