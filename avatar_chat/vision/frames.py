"""
Frame helpers shared by the avatar clip and the camera preview.
"""

import logging
from typing import Optional, Protocol, Tuple, Union

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

class FrameSurface(Protocol):
    """Anything that can display video frames (a window label in the app)."""

    def show_frame(self, image: Image.Image) -> None: ...

    def clear(self) -> None: ...

def open_capture(source: Union[int, str]) -> Optional[cv2.VideoCapture]:
    """Open a capture device or file; return None if it cannot be opened."""
    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        capture.release()
        return None
    return capture

def to_image(frame: np.ndarray, size: Tuple[int, int]) -> Image.Image:
    """Convert an OpenCV BGR frame to an RGB PIL image of the given size."""
    rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    if (rgb.shape[1], rgb.shape[0]) != size:
        rgb = cv2.resize(rgb, size, interpolation=cv2.INTER_AREA)
    return Image.fromarray(rgb)
