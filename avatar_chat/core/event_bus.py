"""
Event Bus - chat, speech and state notifications between components.
"""

import inspect
import logging
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"     # ChatState
USER_SUBMITTED = "user_submitted"   # raw user text
AI_RESPONSE = "ai_response"         # reply text
SPEECH_STARTED = "speech_started"   # utterance text
SPEECH_ENDED = "speech_ended"       # utterance text

KNOWN_EVENTS = frozenset({STATE_CHANGED, USER_SUBMITTED, AI_RESPONSE, SPEECH_STARTED, SPEECH_ENDED})

class EventBus:
    """Delivers events to listeners in subscription order.

    Listeners may be plain callables or coroutine functions. A failing
    listener is logged and skipped. Nothing is delivered before
    ``initialize`` or after ``shutdown``.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.running = False

    async def initialize(self):
        self.running = True
        logger.info("Event bus initialized")

    def subscribe(self, event_name: str, callback: Callable):
        if event_name not in KNOWN_EVENTS:
            logger.warning(f"Subscribing to unknown event: {event_name}")
        self._listeners[event_name].append(callback)
        logger.debug(f"Subscribed to {event_name}: {getattr(callback, '__qualname__', callback)}")

    def unsubscribe(self, event_name: str, callback: Callable):
        try:
            self._listeners[event_name].remove(callback)
        except ValueError:
            logger.debug(f"Listener was not subscribed to {event_name}")

    async def emit(self, event_name: str, *args, **kwargs):
        """Deliver an event to every listener subscribed to it."""
        if not self.running:
            return

        # Listeners may unsubscribe while being called
        listeners = list(self._listeners.get(event_name, ()))
        for callback in listeners:
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")

    async def shutdown(self):
        self.running = False
        self._listeners.clear()
        logger.info("Event bus shutdown")
