"""
Camera preview - shows the live webcam feed next to the avatar.
Runs on its own and shares nothing with the chat pipeline.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..core.config import VideoConfig
from .frames import FrameSurface, open_capture, to_image

logger = logging.getLogger(__name__)

class CameraPreview:
    """Live camera feed attached to a frame surface."""

    def __init__(self,
                 config: VideoConfig,
                 surface: Optional[FrameSurface] = None,
                 opener: Callable = open_capture):
        self.config = config
        self.surface = surface
        self._opener = opener
        self._capture = None
        self._task: Optional[asyncio.Task] = None
        self._started = False

    @property
    def active(self) -> bool:
        return self._capture is not None

    async def start(self) -> bool:
        """Open the camera once and start streaming frames to the surface.

        Returns False if the camera could not be opened; the surface is
        left empty in that case.
        """
        if self._started:
            return self.active
        self._started = True

        loop = asyncio.get_running_loop()
        try:
            self._capture = await loop.run_in_executor(None, self._opener, self.config.camera_index)
            if self._capture is None:
                raise RuntimeError(f"device {self.config.camera_index} could not be opened")
        except Exception as e:
            logger.error(f"Camera access denied: {e}")
            self._capture = None
            self._clear_surface()
            return False

        self._task = asyncio.create_task(self._pump())
        logger.info(f"Camera preview started on device {self.config.camera_index}")
        return True

    def _read_frame(self):
        ok, frame = self._capture.read()
        return frame if ok else None

    async def _pump(self):
        loop = asyncio.get_running_loop()
        size = (self.config.frame_width, self.config.frame_height)
        try:
            while self._capture is not None:
                frame = await loop.run_in_executor(None, self._read_frame)
                if frame is None:
                    logger.error("Camera stopped delivering frames")
                    break
                if self.surface:
                    self.surface.show_frame(to_image(frame, size))
                await asyncio.sleep(self.config.frame_interval)
        except Exception as e:
            logger.error(f"Camera preview error: {e}")
        self._release()
        self._clear_surface()

    def _clear_surface(self):
        if self.surface:
            self.surface.clear()

    def _release(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    async def stop(self):
        """Stop streaming and release the camera."""
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._release()
        logger.info("Camera preview stopped")
