"""
Voice Synthesis - speaks assistant text with pyttsx3 while the avatar clip plays.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Set

import pyttsx3

from ..core.config import VoiceConfig
from ..core.event_bus import SPEECH_ENDED, SPEECH_STARTED, EventBus
from ..vision.avatar import AvatarVideo

logger = logging.getLogger(__name__)

class SpeechOutput:
    """Text-to-speech synchronized with the avatar video.

    The engine lives on a single worker thread, so utterances are spoken one
    after another in call order and a new call never interrupts the current
    one. Each call restarts the avatar clip and pauses it when its own
    utterance ends.
    """

    def __init__(self,
                 config: VoiceConfig,
                 avatar: Optional[AvatarVideo] = None,
                 event_bus: Optional[EventBus] = None,
                 engine_factory: Callable[[], Any] = pyttsx3.init):
        self.config = config
        self.avatar = avatar
        self.event_bus = event_bus
        self._engine_factory = engine_factory
        self.engine = None
        self.available_voices: List[Dict[str, Any]] = []

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tts")
        self._pending: Set[asyncio.Task] = set()

    async def initialize(self):
        """Create the TTS engine on its worker thread."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self._executor, self._init_engine)
            logger.info(f"pyttsx3 initialized with {len(self.available_voices)} voices")
        except Exception as e:
            logger.error(f"Failed to initialize pyttsx3: {e}")
            self.engine = None

    def _init_engine(self):
        engine = self._engine_factory()

        voices = engine.getProperty('voices') or []
        self.available_voices = [
            {
                'id': voice.id,
                'name': voice.name,
                'languages': list(getattr(voice, 'languages', []) or []),
            }
            for voice in voices
        ]

        voice_id = self._pick_voice()
        if voice_id:
            engine.setProperty('voice', voice_id)

        engine.setProperty('rate', self.config.tts_rate)
        engine.setProperty('volume', self.config.tts_volume)
        self.engine = engine

    def _pick_voice(self) -> Optional[str]:
        if self.config.tts_voice != "default":
            for voice in self.available_voices:
                if self.config.tts_voice.lower() in voice['name'].lower():
                    return voice['id']

        # en-US, en_US, b'\x05en_US' (espeak)
        wanted = self.config.language.lower().replace('-', '_')
        for voice in self.available_voices:
            for lang in voice['languages']:
                if isinstance(lang, bytes):
                    lang = lang.decode(errors='ignore')
                if wanted in str(lang).lower().replace('-', '_'):
                    return voice['id']
        return None

    def speak(self, text: str) -> Optional[asyncio.Task]:
        """Queue text for speech and start the avatar clip.

        Returns the task that completes when this utterance has finished.
        """
        if not text or not text.strip():
            return None

        if self.avatar:
            self.avatar.restart()
            self.avatar.play()

        task = asyncio.create_task(self._speak(text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _speak(self, text: str):
        loop = asyncio.get_running_loop()
        try:
            await self._emit(SPEECH_STARTED, text)
            await loop.run_in_executor(self._executor, self._say, text)
        except Exception as e:
            logger.error(f"Speech synthesis error: {e}")
        finally:
            if self.avatar:
                self.avatar.pause()
            await self._emit(SPEECH_ENDED, text)

    def _say(self, text: str):
        if self.engine is None:
            raise RuntimeError("TTS engine not available")
        logger.debug(f"Speaking: {text[:80]}")
        self.engine.say(text)
        self.engine.runAndWait()

    async def _emit(self, event_name: str, *args):
        if self.event_bus:
            await self.event_bus.emit(event_name, *args)

    async def shutdown(self):
        """Shutdown the voice synthesis system."""
        try:
            if self.engine is not None:
                self.engine.stop()
            for task in list(self._pending):
                task.cancel()
            self._executor.shutdown(wait=False, cancel_futures=True)
            logger.info("Voice synthesis shutdown complete")
        except Exception as e:
            logger.error(f"Error during voice synthesis shutdown: {e}")
