"""
Chat controller - runs the correct → speak → complete → speak pipeline.
"""

import asyncio
import logging
from typing import Optional

from ..ai.completion import CompletionClient
from ..ai.grammar import GrammarCorrector
from ..voice.recognition import SpeechInput
from ..voice.synthesis import SpeechOutput
from .event_bus import AI_RESPONSE, USER_SUBMITTED, EventBus
from .state import ChatState

logger = logging.getLogger(__name__)

class ChatController:
    """Owns the chat state and drives typed and spoken submissions.

    Pipeline runs are serialized: a submission made while another one is
    still waiting on the AI is queued behind it, so only one completion
    call (and one loading flag) is ever active.
    """

    def __init__(self,
                 state: ChatState,
                 corrector: GrammarCorrector,
                 completion: CompletionClient,
                 speech_output: Optional[SpeechOutput] = None,
                 speech_input: Optional[SpeechInput] = None,
                 event_bus: Optional[EventBus] = None):
        self.state = state
        self.corrector = corrector
        self.completion = completion
        self.speech_output = speech_output
        self.speech_input = speech_input
        self.event_bus = event_bus
        self._pipeline_lock = asyncio.Lock()

    async def submit(self, text: Optional[str] = None):
        """Handle a typed submission; the input buffer is always cleared."""
        if text is None:
            text = self.state.input_text
        try:
            await self._run_pipeline(text)
        finally:
            await self.state.clear_input()

    async def handle_transcript(self, text: str):
        """Handle a recognized utterance as if it had been typed."""
        await self.state.set_input(text)
        await self._run_pipeline(text)

    async def start_listening(self) -> bool:
        """Start a single-shot recognition session (the 🎤 button)."""
        if not self.speech_input:
            logger.warning("No speech input configured")
            return False
        return await self.speech_input.listen_once(self.handle_transcript)

    async def _run_pipeline(self, text: str) -> str:
        async with self._pipeline_lock:
            logger.debug(f"Pipeline start: {text!r}")
            if self.event_bus:
                await self.event_bus.emit(USER_SUBMITTED, text)

            corrected = self.corrector.correct(text)
            if corrected != text:
                logger.info(f"Corrected to: {corrected}")
                await self.state.add_correction(corrected)
                self._speak(f"I think you should say: {corrected}")

            reply = await self.completion.fetch_reply(corrected)
            await self.state.add_reply(reply)
            if self.event_bus:
                await self.event_bus.emit(AI_RESPONSE, reply)
            self._speak(reply)
            return reply

    def _speak(self, text: str):
        if self.speech_output:
            self.speech_output.speak(text)
