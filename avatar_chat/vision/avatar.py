"""
Avatar video - plays the avatar clip while the assistant is speaking.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

import cv2

from ..core.config import VideoConfig
from .frames import FrameSurface, open_capture, to_image

logger = logging.getLogger(__name__)

class AvatarVideo:
    """Restartable, pausable avatar clip rendered onto a frame surface.

    Frames are decoded in the default executor; only the pump task touches
    the capture, so restart requests are handed over through a flag.
    """

    def __init__(self,
                 config: VideoConfig,
                 surface: Optional[FrameSurface] = None,
                 opener: Callable = open_capture):
        self.config = config
        self.surface = surface
        self._opener = opener
        self._capture = None
        self._task: Optional[asyncio.Task] = None
        self._rewind = False
        self.playing = False

    @property
    def available(self) -> bool:
        return self._capture is not None

    async def initialize(self):
        """Open the clip and show its first frame."""
        path = Path(self.config.avatar_path)
        if not path.exists():
            logger.warning(f"Avatar video not found: {path}")
            return

        loop = asyncio.get_running_loop()
        self._capture = await loop.run_in_executor(None, self._opener, str(path))
        if self._capture is None:
            logger.error(f"Could not open avatar video: {path}")
            return

        frame = await loop.run_in_executor(None, self._read_frame)
        if frame is not None:
            self._show(frame)
        self._rewind = True
        logger.info(f"Avatar video loaded: {path}")

    def restart(self):
        """Seek back to the first frame on the next read."""
        self._rewind = True

    def play(self):
        if not self.available:
            return
        self.playing = True
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._pump())

    def pause(self):
        self.playing = False

    def _read_frame(self):
        if self._rewind:
            self._capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            self._rewind = False
        ok, frame = self._capture.read()
        return frame if ok else None

    def _show(self, frame):
        if self.surface:
            size = (self.config.frame_width, self.config.frame_height)
            self.surface.show_frame(to_image(frame, size))

    async def _pump(self):
        loop = asyncio.get_running_loop()
        empty_read = False
        try:
            while self.playing and self._capture is not None:
                frame = await loop.run_in_executor(None, self._read_frame)
                if frame is None:
                    # An empty clip would rewind forever
                    if self.config.avatar_loop and not empty_read:
                        empty_read = True
                        self._rewind = True
                        continue
                    self.playing = False
                    break
                empty_read = False
                self._show(frame)
                await asyncio.sleep(self.config.frame_interval)
        except Exception as e:
            logger.error(f"Avatar playback error: {e}")
            self.playing = False

    async def shutdown(self):
        self.playing = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        logger.info("Avatar video shutdown complete")
