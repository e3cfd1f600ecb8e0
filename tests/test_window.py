"""Unit tests for the preview window.

Only the display buffer is exercised; no window is opened.
"""

import numpy as np
import pytest


class TestPreviewWindow:
    """Tests for PreviewWindow's image conversion."""

    def test_update_image_converts_bgr_to_rgb(self):
        from src.pathy.core.render import Image
        from src.pathy.preview.window import PreviewWindow

        image = Image(4, 2)
        image.pixels[:] = 0
        image.pixels[1, 3] = (255, 0, 51)  # B, G, R

        window = PreviewWindow(image)
        display = window.display_image.to_numpy()

        assert display.shape == (4, 2, 3)
        np.testing.assert_allclose(display[3, 1], [0.2, 0.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(display[0, 0], [0.0, 0.0, 0.0])

    def test_size_mismatch_raises(self):
        from src.pathy.core.render import Image
        from src.pathy.preview.window import PreviewWindow

        window = PreviewWindow(Image(4, 2))
        with pytest.raises(ValueError, match="doesn't match"):
            window.update_image(Image(2, 4))

    def test_window_not_created_eagerly(self):
        from src.pathy.core.render import Image
        from src.pathy.preview.window import PreviewWindow

        window = PreviewWindow(Image(2, 2))
        assert window._window is None
