#!/usr/bin/env python3
"""Render a scene file to a PNG image.

Loads a Mitsuba-style XML scene, renders it once with the Whitted-style
integrator on the CPU thread pool, reports the ray throughput and saves the
result. With --show the image is also displayed in a window.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene SCENE           Scene file (default: examples/scenes/spheres.xml)
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --output OUTPUT         Output file path (default: render.png)
    --max-depth DEPTH       Mirror bounces followed (default: 2)
    --light-samples N       Samples per area light and environment (default: 32)
    --workers N             Worker threads, 1 for single-threaded (default: all)
    --seed SEED             Random seed (default: 0)
    --show                  Display the image in a window after rendering
    --debug                 Enable Taichi debug checks and debug logging
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene --width 320 --height 240 --workers 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

DEFAULT_SCENE = Path(__file__).parent / "scenes" / "spheres.xml"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene file to a PNG image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=str(DEFAULT_SCENE),
        help="Scene file (default: examples/scenes/spheres.xml)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=2,
        help="Mirror bounces followed (default: 2)",
    )
    parser.add_argument(
        "--light-samples",
        type=int,
        default=32,
        help="Samples per area light and environment (default: 32)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads, 1 for single-threaded (default: all hardware threads)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display the image in a window after rendering",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Taichi debug checks and debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    scene_path: str,
    width: int = 640,
    height: int = 480,
    output_path: str = "render.png",
    max_depth: int = 2,
    light_samples: int = 32,
    workers: int | None = None,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene file and save it.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathy.core.render import Image, RenderSettings
    from src.pathy.core.stats import timed_render
    from src.pathy.preview.export import save_png
    from src.pathy.scene.loader import load_scene

    scene = load_scene(scene_path)
    if not quiet:
        print(
            f"Loaded {scene_path}: {len(scene.spheres)} spheres, "
            f"{len(scene.point_lights)} point lights, {len(scene.area_lights)} area lights"
        )

    settings = RenderSettings(max_depth=max_depth, light_samples=light_samples, workers=workers)
    image = Image(width, height)

    if not quiet:
        print(f"Rendering {width}x{height}...")
    stats = timed_render(scene, image, settings)
    if not quiet:
        print(stats.summary())

    output_file = save_png(image, output_path)
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        from src.pathy.preview.window import PreviewWindow

        if PreviewWindow.is_display_available():
            PreviewWindow(image, title=Path(scene_path).name).run()
        elif not quiet:
            print("No display available, skipping preview window")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    from src.pathy.core.runtime import init_runtime

    try:
        num_workers = init_runtime(workers=args.workers, seed=args.seed, debug=args.debug)
        if not args.quiet:
            print(f"Using CPU backend with {num_workers} worker threads")

        render_scene(
            args.scene,
            width=args.width,
            height=args.height,
            output_path=args.output,
            max_depth=args.max_depth,
            light_samples=args.light_samples,
            workers=args.workers,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
