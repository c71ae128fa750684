"""
Chat state - the input buffer, transcript and loading flag shown by the window.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .event_bus import STATE_CHANGED, EventBus

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class TranscriptLine:
    """One line of the session transcript."""
    kind: str  # "correction" or "reply"
    text: str

    def render(self) -> str:
        if self.kind == "correction":
            return f"Correction: {self.text}"
        return f"AI: {self.text}"

class ChatState:
    """Session state owned by the chat controller.

    All mutation goes through the methods below; each one publishes
    ``state_changed`` so the view can redraw.
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self.input_text = ""
        self.transcript: List[TranscriptLine] = []
        self.loading = False

    def edit_input(self, text: str):
        """Record keystrokes from the input field; the field already shows them."""
        self.input_text = text

    async def set_input(self, text: str):
        self.input_text = text
        await self._changed()

    async def clear_input(self):
        self.input_text = ""
        await self._changed()

    async def set_loading(self, loading: bool):
        self.loading = loading
        logger.debug(f"Loading: {loading}")
        await self._changed()

    async def add_correction(self, corrected: str):
        self.transcript.append(TranscriptLine("correction", corrected))
        await self._changed()

    async def add_reply(self, reply: str):
        self.transcript.append(TranscriptLine("reply", reply))
        await self._changed()

    def transcript_text(self) -> str:
        return "\n".join(line.render() for line in self.transcript)

    async def _changed(self):
        if self.event_bus:
            await self.event_bus.emit(STATE_CHANGED, self)
