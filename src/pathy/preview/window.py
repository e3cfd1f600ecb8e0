"""Preview window for a finished render, using Taichi GGUI.

Example:
    >>> from src.pathy.preview.window import PreviewWindow
    >>> if PreviewWindow.is_display_available():
    ...     PreviewWindow(image).run()
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    from src.pathy.core.render import Image


class PreviewWindow:
    """Window that shows a rendered image until it is closed.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field of shape (width, height) holding RGB
            values in [0, 1].
    """

    def __init__(self, image: Image, *, title: str = "pathy") -> None:
        """Create the display buffer for an image.

        The window itself is created when run() or show_frame() is first
        called, so constructing a PreviewWindow works without a display.

        Args:
            image: The rendered image to show.
            title: Window title.
        """
        self.width = image.width
        self.height = image.height
        self._title = title
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )
        self.update_image(image)

    def update_image(self, image: Image) -> None:
        """Copy the image's pixel bytes into the display buffer.

        Raises:
            ValueError: If the image size differs from the window size.
        """
        if (image.width, image.height) != (self.width, self.height):
            raise ValueError(
                f"Image size {image.width}x{image.height} doesn't match "
                f"window size {self.width}x{self.height}"
            )

        # BGR bytes -> RGB floats. Both the buffer and the canvas have their
        # origin at the bottom-left, so only (y, x) -> (x, y) is needed.
        rgb = image.pixels[..., ::-1].astype(np.float32) / 255.0
        self.display_image.from_numpy(np.ascontiguousarray(np.transpose(rgb, (1, 0, 2))))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(name=self._title, res=(self.width, self.height), vsync=True)
        self._canvas = self._window.get_canvas()

    def is_running(self) -> bool:
        self._initialize_window()
        assert self._window is not None
        return self._window.running

    def show_frame(self) -> None:
        """Present the display buffer once."""
        self._initialize_window()
        assert self._window is not None and self._canvas is not None
        self._canvas.set_image(self.display_image)
        self._window.show()

    def run(self) -> None:
        """Show the image until the window is closed."""
        while self.is_running():
            self.show_frame()

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt":
            return True
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not os.environ.get("DISPLAY"))
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
