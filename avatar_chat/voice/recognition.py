"""
Speech recognition - single-shot microphone capture for the 🎤 button.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import speech_recognition as sr

from ..core.config import VoiceConfig

logger = logging.getLogger(__name__)

UNSUPPORTED_NOTICE = "Speech recognition not supported on this system."

class SpeechInput:
    """Records one utterance and hands the final transcript to a callback.

    No interim results are produced; a session either yields one transcript
    or nothing. There is no retry and no way to cancel a running session.
    """

    def __init__(self,
                 config: VoiceConfig,
                 notify: Optional[Callable[[str], None]] = None,
                 recognizer: Optional[sr.Recognizer] = None,
                 microphone_factory: Callable = sr.Microphone):
        self.config = config
        self.notify = notify
        self.recognizer = recognizer or sr.Recognizer()
        self._microphone_factory = microphone_factory
        self.is_listening = False

    def list_microphones(self) -> List[str]:
        # Raises AttributeError when PyAudio is missing
        return self._microphone_factory.list_microphone_names()

    def is_available(self) -> bool:
        """Whether a microphone can be used for recognition."""
        try:
            return len(self.list_microphones()) > 0
        except Exception as e:
            logger.warning(f"Microphone unavailable: {e}")
            return False

    async def listen_once(self, on_transcript: Callable[[str], Awaitable[None]]) -> bool:
        """Run one recognition session.

        Returns False without doing anything else when recognition is not
        available (after showing a notice) or a session is already running.
        """
        if not self.is_available():
            logger.warning("Speech recognition requested but not supported")
            if self.notify:
                self.notify(UNSUPPORTED_NOTICE)
            return False

        if self.is_listening:
            logger.warning("Already listening")
            return False

        self.is_listening = True
        loop = asyncio.get_running_loop()
        try:
            logger.info(f"Listening for one utterance ({self.config.language})")
            transcript = await loop.run_in_executor(None, self._capture_and_recognize)
        finally:
            self.is_listening = False

        if transcript:
            logger.info(f"Speech recognized: {transcript}")
            await on_transcript(transcript)
        return True

    def _capture_and_recognize(self) -> Optional[str]:
        try:
            with self._microphone_factory() as source:
                if self.config.ambient_adjust_seconds > 0:
                    self.recognizer.adjust_for_ambient_noise(
                        source, duration=self.config.ambient_adjust_seconds
                    )
                audio = self.recognizer.listen(
                    source,
                    timeout=self.config.listen_timeout,
                    phrase_time_limit=self.config.phrase_time_limit,
                )
        except sr.WaitTimeoutError:
            logger.info("No speech before timeout")
            return None
        except Exception as e:
            logger.error(f"Microphone capture failed: {e}")
            return None

        try:
            text = self.recognizer.recognize_google(audio, language=self.config.language)
        except sr.UnknownValueError:
            logger.info("Speech was not understood")
            return None
        except sr.RequestError as e:
            logger.error(f"Recognition service error: {e}")
            return None

        return text.strip() or None
