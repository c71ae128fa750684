"""
Chat Window - avatar and camera panels, text input with Send / 🎤 buttons,
and the transcript area. Renders ChatState and forwards user actions.
"""

import logging
from typing import Callable, Optional, Tuple
import tkinter as tk
from tkinter import messagebox

from PIL import Image, ImageTk

from ..core.config import GUIConfig, VideoConfig
from ..core.state import ChatState

logger = logging.getLogger(__name__)

BG = '#2c3e50'
FG = '#ecf0f1'
MUTED = '#bdc3c7'

THINKING = "Thinking..."

def output_view(state: ChatState) -> Tuple[str, str]:
    """Output text and Send button state for a chat state."""
    if state.loading:
        return THINKING, tk.DISABLED
    return state.transcript_text(), tk.NORMAL

class VideoSurface:
    """Shows PIL frames in a Tk label."""

    def __init__(self, label: tk.Label):
        self.label = label
        self._photo: Optional[ImageTk.PhotoImage] = None

    def show_frame(self, image: Image.Image):
        photo = ImageTk.PhotoImage(image, master=self.label)
        self.label.configure(image=photo)
        # Keep reference to prevent garbage collection
        self._photo = photo

    def clear(self):
        self.label.configure(image='')
        self._photo = None

class ChatWindow:
    """Main application window."""

    def __init__(self, config: GUIConfig, video: VideoConfig):
        self.config = config
        self.video = video

        # Tkinter components
        self.root: Optional[tk.Tk] = None
        self.input_var: Optional[tk.StringVar] = None
        self.entry: Optional[tk.Entry] = None
        self._placeholder_on = False
        self.send_button: Optional[tk.Button] = None
        self.mic_button: Optional[tk.Button] = None
        self.output: Optional[tk.Text] = None
        self.avatar_surface: Optional[VideoSurface] = None
        self.camera_surface: Optional[VideoSurface] = None

        # Event callbacks
        self.on_submit: Optional[Callable[[str], None]] = None
        self.on_mic: Optional[Callable[[], None]] = None
        self.on_input_changed: Optional[Callable[[str], None]] = None
        self.on_close: Optional[Callable[[], None]] = None

    async def initialize(self):
        """Create the window and its widgets."""
        try:
            self.root = tk.Tk()
            self.root.title(self.config.window_title)
            self.root.geometry(f"{self.config.width}x{self.config.height}")
            self.root.configure(bg=BG)
            self.root.protocol("WM_DELETE_WINDOW", self._on_close_event)

            main_frame = tk.Frame(self.root, bg=BG, padx=20, pady=20)
            main_frame.pack(fill=tk.BOTH, expand=True)

            tk.Label(
                main_frame,
                text=self.config.window_title,
                font=("Arial", 20, "bold"),
                fg=FG,
                bg=BG
            ).pack()
            tk.Label(
                main_frame,
                text=self.config.subtitle,
                font=("Arial", 11),
                fg=MUTED,
                bg=BG
            ).pack(pady=(0, 10))

            # Avatar + camera side by side
            video_frame = tk.Frame(main_frame, bg=BG)
            video_frame.pack()
            self.avatar_surface = VideoSurface(self._video_label(video_frame))
            self.camera_surface = VideoSurface(self._video_label(video_frame))

            # Input row
            input_frame = tk.Frame(main_frame, bg=BG)
            input_frame.pack(fill=tk.X, pady=10)

            self.input_var = tk.StringVar()
            self.input_var.trace_add('write', self._on_input_write)
            self.entry = tk.Entry(input_frame, textvariable=self.input_var, font=("Arial", 12))
            self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=(0, 5))
            self.entry.bind('<Return>', self._on_submit_event)
            self.entry.bind('<FocusIn>', self._hide_placeholder)
            self.entry.bind('<FocusOut>', self._show_placeholder)

            self.send_button = tk.Button(input_frame, text="Send", command=self._on_submit_event)
            self.send_button.pack(side=tk.LEFT, padx=(0, 5))
            self.mic_button = tk.Button(input_frame, text="🎤", command=self._on_mic_event)
            self.mic_button.pack(side=tk.LEFT)

            # Output
            self.output = tk.Text(
                main_frame,
                height=10,
                wrap=tk.WORD,
                font=("Courier", 11),
                state=tk.DISABLED
            )
            self.output.pack(fill=tk.BOTH, expand=True)

            self.entry.focus_set()
            logger.info("Chat window created successfully")

        except Exception as e:
            logger.error(f"Failed to initialize window: {e}")
            raise

    def _video_label(self, parent: tk.Frame) -> tk.Label:
        # Blank image so width/height are in pixels
        blank = tk.PhotoImage(master=parent, width=self.video.frame_width, height=self.video.frame_height)
        label = tk.Label(parent, image=blank, bg='black')
        label.image = blank
        label.pack(side=tk.LEFT, padx=5)
        return label

    def _show_placeholder(self, _event=None):
        if not self.input_var.get() and self.root.focus_get() is not self.entry:
            self._placeholder_on = True
            self.entry.configure(fg='grey')
            self.input_var.set(self.config.placeholder)

    def _hide_placeholder(self, _event=None):
        if self._placeholder_on:
            self._placeholder_on = False
            self.entry.configure(fg='black')
            self.input_var.set("")

    def _current_input(self) -> str:
        if self._placeholder_on:
            return ""
        return self.input_var.get()

    def _on_input_write(self, *_args):
        if self.on_input_changed:
            self.on_input_changed(self._current_input())

    def _on_submit_event(self, _event=None):
        if self.send_button and str(self.send_button['state']) == tk.DISABLED:
            return
        if self.on_submit:
            self.on_submit(self._current_input())

    def _on_mic_event(self):
        if self.on_mic:
            self.on_mic()

    def _on_close_event(self):
        if self.on_close:
            self.on_close()
        else:
            self.close()

    def render(self, state: ChatState):
        """Redraw from state."""
        if not self.root:
            return

        if self._current_input() != state.input_text:
            self._hide_placeholder()
            self.input_var.set(state.input_text)
            if not state.input_text:
                self._show_placeholder()

        text, send_state = output_view(state)
        self.send_button.configure(state=send_state)

        self.output.configure(state=tk.NORMAL)
        self.output.delete('1.0', tk.END)
        self.output.insert('1.0', text)
        self.output.configure(state=tk.DISABLED)

    def show_notice(self, message: str):
        """Blocking warning dialog."""
        logger.warning(f"Notice: {message}")
        messagebox.showwarning(self.config.window_title, message, parent=self.root)

    async def process_events(self):
        """Process window events (non-blocking)."""
        if self.root:
            try:
                self.root.update_idletasks()
                self.root.update()
            except tk.TclError:
                # Window has been destroyed
                self.root = None

    @property
    def is_open(self) -> bool:
        return self.root is not None

    def close(self):
        """Close the window."""
        if self.root:
            self.root.quit()
            self.root.destroy()
            self.root = None

    async def shutdown(self):
        """Shutdown the window system."""
        try:
            self.close()
            logger.info("Window shutdown complete")
        except Exception as e:
            logger.error(f"Error during window shutdown: {e}")
