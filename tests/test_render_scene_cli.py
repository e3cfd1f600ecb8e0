"""Tests for the render_scene example script.

main() initializes Taichi itself, so these tests call parse_args() and
render_scene() directly against the session's runtime.
"""

from PIL import Image as PILImage


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_defaults(self):
        from examples.render_scene import DEFAULT_SCENE, parse_args

        args = parse_args([])
        assert args.scene == str(DEFAULT_SCENE)
        assert (args.width, args.height) == (640, 480)
        assert args.max_depth == 2
        assert args.light_samples == 32
        assert args.workers is None
        assert args.show is False

    def test_overrides(self):
        from examples.render_scene import parse_args

        args = parse_args(
            ["--width", "32", "--height", "16", "--workers", "1", "--seed", "9", "--quiet"]
        )
        assert (args.width, args.height) == (32, 16)
        assert args.workers == 1
        assert args.seed == 9
        assert args.quiet is True


class TestRenderScene:
    """Tests for rendering the bundled scene to a file."""

    def test_render_bundled_scene(self, tmp_path, capsys):
        from examples.render_scene import DEFAULT_SCENE, render_scene

        output = render_scene(
            str(DEFAULT_SCENE),
            width=24,
            height=16,
            output_path=str(tmp_path / "out.png"),
            light_samples=2,
        )

        assert output.exists()
        with PILImage.open(output) as loaded:
            assert loaded.size == (24, 16)
        assert "million rays/second" in capsys.readouterr().out
