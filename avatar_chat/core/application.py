"""
Main application class for AI Grammar & Assistant.
Coordinates all components and manages the main application loop.
"""

import asyncio
import logging
import signal
from typing import Optional, Set

from .config import Config
from .controller import ChatController
from .event_bus import (
    AI_RESPONSE,
    SPEECH_ENDED,
    SPEECH_STARTED,
    STATE_CHANGED,
    USER_SUBMITTED,
    EventBus,
)
from .state import ChatState
from ..ai.completion import CompletionClient
from ..ai.grammar import GrammarCorrector
from ..gui.window import ChatWindow
from ..vision.avatar import AvatarVideo
from ..vision.camera import CameraPreview
from ..voice.recognition import SpeechInput
from ..voice.synthesis import SpeechOutput

logger = logging.getLogger(__name__)

class AssistantApplication:
    """Main application class that orchestrates all components."""

    def __init__(self, config: Config):
        self.config = config
        self.running = False
        self.event_bus = EventBus()

        # Core components
        self.window: Optional[ChatWindow] = None
        self.state: Optional[ChatState] = None
        self.controller: Optional[ChatController] = None
        self.avatar: Optional[AvatarVideo] = None
        self.camera: Optional[CameraPreview] = None
        self.speech_output: Optional[SpeechOutput] = None
        self.speech_input: Optional[SpeechInput] = None

        # Tasks started from window callbacks
        self._tasks: Set[asyncio.Task] = set()

        # Setup signal handlers
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        logger.info("Application created")

    async def initialize(self):
        """Initialize all application components."""
        logger.info("Initializing application components...")

        try:
            await self.event_bus.initialize()

            self.window = ChatWindow(self.config.gui, self.config.video)
            await self.window.initialize()

            self.state = ChatState(self.event_bus)

            self.avatar = AvatarVideo(self.config.video, surface=self.window.avatar_surface)
            await self.avatar.initialize()

            self.speech_output = SpeechOutput(
                config=self.config.voice,
                avatar=self.avatar,
                event_bus=self.event_bus
            )
            await self.speech_output.initialize()

            self.speech_input = SpeechInput(
                config=self.config.voice,
                notify=self.window.show_notice
            )

            self.controller = ChatController(
                state=self.state,
                corrector=GrammarCorrector(),
                completion=CompletionClient(self.config.ai, state=self.state),
                speech_output=self.speech_output,
                speech_input=self.speech_input,
                event_bus=self.event_bus
            )

            self.camera = CameraPreview(self.config.video, surface=self.window.camera_surface)

            self._setup_event_handlers()
            self.window.render(self.state)

            logger.info("All components initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize application: {e}", exc_info=True)
            raise

    def _setup_event_handlers(self):
        """Wire window actions and state updates."""

        # State -> View
        self.event_bus.subscribe(STATE_CHANGED, self.window.render)

        # View -> Controller
        self.window.on_input_changed = self.state.edit_input
        self.window.on_submit = lambda text: self._spawn(self.controller.submit(text))
        self.window.on_mic = lambda: self._spawn(self.controller.start_listening())
        self.window.on_close = self._handle_window_close

        # Session log
        self.event_bus.subscribe(USER_SUBMITTED, self._handle_user_submitted)
        self.event_bus.subscribe(AI_RESPONSE, self._handle_ai_response)
        self.event_bus.subscribe(SPEECH_STARTED, self._handle_speech_started)
        self.event_bus.subscribe(SPEECH_ENDED, self._handle_speech_ended)

        logger.info("Event handlers configured")

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception():
            logger.error(f"Background task failed: {task.exception()}")

    async def _handle_user_submitted(self, text: str):
        logger.info(f"User: {text}")

    async def _handle_ai_response(self, reply: str):
        logger.info(f"AI: {reply}")

    async def _handle_speech_started(self, text: str):
        logger.info(f"Speaking: {text[:80]}")

    async def _handle_speech_ended(self, text: str):
        logger.info(f"Finished speaking: {text[:80]}")

    def _handle_window_close(self):
        logger.info("Window close requested")
        self.running = False

    async def run(self):
        """Main application run loop."""
        try:
            await self.initialize()

            self.running = True
            logger.info("Starting main application loop")

            # Camera runs independently of the chat pipeline
            self._spawn(self.camera.start())

            while self.running:
                try:
                    await self.window.process_events()
                    if not self.window.is_open:
                        break

                    # Small delay to prevent excessive CPU usage
                    await asyncio.sleep(1/60)

                except Exception as e:
                    logger.error(f"Error in main loop: {e}", exc_info=True)

        finally:
            await self.shutdown()

    async def shutdown(self):
        """Shutdown the application gracefully."""
        logger.info("Shutting down application...")
        self.running = False

        for task in list(self._tasks):
            task.cancel()

        # Shutdown components in reverse order
        steps = [
            self.camera.stop if self.camera else None,
            self.speech_output.shutdown if self.speech_output else None,
            self.avatar.shutdown if self.avatar else None,
            self.window.shutdown if self.window else None,
            self.event_bus.shutdown,
        ]

        for step in steps:
            if step:
                try:
                    await step()
                except Exception as e:
                    logger.error(f"Error shutting down component: {e}")

        logger.info("Application shutdown complete")

    def _signal_handler(self, signum, frame):
        """Handle system signals for graceful shutdown."""
        logger.info(f"Received signal {signum}")
        self.running = False
