"""Tests for the render dispatch.

Tests cover:
- Image buffer allocation and validation
- Render settings validation
- Full renders of simple scenes with exact expected output
- Ray counting across single-worker and parallel dispatch
"""

import numpy as np
import pytest


def _spheres_scene():
    from src.pathy.scene.description import (
        ConstantLight,
        Material,
        PointLight,
        Scene,
        SceneSphere,
        SphereAreaLight,
    )

    return Scene(
        spheres=(
            SceneSphere((0.0, -100.5, 0.0), 100.0, Material((0.6, 0.6, 0.6))),
            SceneSphere((-1.1, 0.0, 0.0), 0.5, Material((0.8, 0.2, 0.2))),
            SceneSphere((0.0, 0.0, 0.0), 0.5, Material((0.9, 0.9, 0.9), is_mirror=True)),
            SceneSphere((1.1, 0.0, 0.0), 0.5, Material((0.2, 0.4, 0.8))),
        ),
        point_lights=(PointLight((-2.0, 4.0, 2.0), (6.0, 6.0, 6.0)),),
        area_lights=(SphereAreaLight((0.0, 3.0, -2.0), 0.5, (8.0, 7.0, 6.0)),),
        constant_light=ConstantLight((0.15, 0.18, 0.25)),
    )


class TestImage:
    """Tests for the Image buffer."""

    def test_allocation(self):
        from src.pathy.core.render import Image

        image = Image(5, 3)
        assert image.pixels.shape == (3, 5, 3)
        assert image.pixels.dtype == np.uint8
        assert image.pitch == 15
        assert image.aspect_ratio == pytest.approx(5.0 / 3.0)
        # New images start white
        assert (image.pixels == 255).all()
        assert image.pixel(4, 2) == (255, 255, 255)

    @pytest.mark.parametrize("size", [(0, 4), (4, -1), (9000, 10), (10, 9000)])
    def test_invalid_size(self, size):
        from src.pathy.core.render import Image

        with pytest.raises(ValueError):
            Image(*size)


class TestRenderSettings:
    """Tests for RenderSettings validation."""

    def test_defaults(self):
        from src.pathy.core.integrator import LIGHT_SAMPLES, MAX_DEPTH
        from src.pathy.core.render import RenderSettings

        settings = RenderSettings()
        assert settings.max_depth == MAX_DEPTH == 2
        assert settings.light_samples == LIGHT_SAMPLES == 32
        assert settings.workers is None

    @pytest.mark.parametrize(
        "kwargs", [{"max_depth": -1}, {"light_samples": -2}, {"workers": 0}]
    )
    def test_invalid(self, kwargs):
        from src.pathy.core.render import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestRender:
    """End-to-end renders."""

    def test_empty_scene_is_constant_color(self):
        """Test every pixel of an empty scene is the tone-mapped environment."""
        from src.pathy.core.render import Image, render
        from src.pathy.preview.tonemap import tone_map
        from src.pathy.scene.description import ConstantLight, Scene

        radiance = (0.2, 0.4, 0.6)
        image = Image(5, 4)
        ray_count = render(Scene(constant_light=ConstantLight(radiance)), image)

        expected = tone_map(np.array(radiance, dtype=np.float32))
        assert tuple(expected) == (203, 169, 123)
        assert (image.pixels == expected).all()
        np.testing.assert_allclose(image.linear, np.broadcast_to(radiance, (4, 5, 3)), atol=1e-6)
        assert ray_count == 20

    def test_black_empty_scene(self):
        from src.pathy.core.render import Image, render
        from src.pathy.scene.description import Scene

        image = Image(3, 3)
        render(Scene(), image)
        assert (image.pixels == 0).all()

    def test_single_worker_matches_parallel_ray_count(self):
        """Test serial and row-parallel renders trace the same number of rays."""
        from src.pathy.core.render import Image, RenderSettings, render

        scene = _spheres_scene()
        serial = render(scene, Image(16, 12), RenderSettings(light_samples=3, workers=1))
        parallel = render(scene, Image(16, 12), RenderSettings(light_samples=3))

        assert serial == parallel
        assert serial > 16 * 12

    def test_deterministic_lighting_matches_across_dispatch(self):
        """Test pixels agree between dispatch modes when no sampling is involved."""
        from src.pathy.core.render import Image, RenderSettings, render

        scene = _spheres_scene()
        serial = Image(16, 12)
        parallel = Image(16, 12)
        render(scene, serial, RenderSettings(light_samples=0, workers=1))
        render(scene, parallel, RenderSettings(light_samples=0))

        np.testing.assert_array_equal(serial.pixels, parallel.pixels)

    def test_ray_count_formula_for_diffuse_view(self):
        """Test rays = pixels * (1 + point lights + samples per env and area light)."""
        from src.pathy.core.render import Image, RenderSettings, render
        from src.pathy.scene.description import (
            CameraConfig,
            PointLight,
            Scene,
            SceneSphere,
            SphereAreaLight,
        )

        # Camera sits inside a huge diffuse sphere, so every primary ray hits it
        scene = Scene(
            spheres=(SceneSphere((0.0, 0.0, 0.0), 50.0),),
            point_lights=(PointLight((0.0, 10.0, 0.0)), PointLight((5.0, 0.0, 0.0))),
            area_lights=(SphereAreaLight((0.0, 0.0, -10.0), 1.0),),
            camera=CameraConfig(eye=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, -1.0)),
        )
        samples = 5
        image = Image(6, 4)
        ray_count = render(scene, image, RenderSettings(light_samples=samples))

        assert ray_count == 6 * 4 * (1 + 2 + samples + samples)

    def test_render_overwrites_every_pixel(self):
        """Test the white initial buffer is fully repainted."""
        from src.pathy.core.render import Image, RenderSettings, render

        image = Image(16, 12)
        render(_spheres_scene(), image, RenderSettings(light_samples=2))
        assert not (image.pixels == 255).all(axis=2).any()

    def test_row_zero_is_bottom(self):
        """Test the ground is drawn in the bottom rows of the buffer."""
        from src.pathy.core.render import Image, RenderSettings, render
        from src.pathy.scene.description import (
            CameraConfig,
            ConstantLight,
            Material,
            Scene,
            SceneSphere,
        )

        scene = Scene(
            spheres=(SceneSphere((0.0, -100.5, 0.0), 100.0, Material((0.0, 0.0, 0.0))),),
            constant_light=ConstantLight((1.0, 1.0, 1.0)),
            camera=CameraConfig(eye=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, -1.0)),
        )
        image = Image(8, 8)
        render(scene, image, RenderSettings(light_samples=1))

        # Bottom row sees the black ground, top row the white sky
        assert (image.pixels[0] == 0).all()
        assert (image.pixels[7] > 250).all()


class TestKernelModules:
    """Tests that modules defining Taichi kernels and funcs import cleanly."""

    @pytest.mark.parametrize(
        "module_name, attribute",
        [
            ("src.pathy.camera.perspective", "get_ray"),
            ("src.pathy.core.render", "render"),
            ("src.pathy.preview.tonemap", "encode_pixel"),
            ("src.pathy.core.integrator", "radiance"),
            ("src.pathy.scene.intersection", "intersect_scene"),
        ],
    )
    def test_import(self, module_name, attribute):
        import importlib

        module = importlib.import_module(module_name)
        assert callable(getattr(module, attribute))


class TestSaturation:
    """Tests that kernel tone mapping quantizes exactly like tone_map."""

    def test_saturated_environment_matches_tone_map(self):
        """Test a white environment gives the same bytes as tone_map(1.0)."""
        from src.pathy.core.render import Image, render
        from src.pathy.preview.tonemap import tone_map
        from src.pathy.scene.description import ConstantLight, Scene

        image = Image(4, 3)
        render(Scene(constant_light=ConstantLight((1.0, 1.0, 1.0))), image)

        expected = tone_map(np.ones(3, dtype=np.float32))
        assert (image.pixels == expected).all()
        # 1.055 * 1 - 0.055 rounds just below 1 in float32
        assert tuple(expected) == (254, 254, 254)

    def test_over_bright_environment_matches_tone_map(self):
        from src.pathy.core.render import Image, render
        from src.pathy.preview.tonemap import tone_map
        from src.pathy.scene.description import ConstantLight, Scene

        radiance = (3.0, 1.0, 0.5)
        image = Image(2, 2)
        render(Scene(constant_light=ConstantLight(radiance)), image)

        expected = tone_map(np.array(radiance, dtype=np.float32))
        assert (image.pixels == expected).all()


class TestWorkers:
    """Tests for the worker count in RenderSettings."""

    def test_pool_size_recorded(self):
        from src.pathy.core.runtime import hardware_concurrency, pool_size

        # conftest initializes with workers=None
        assert pool_size() == hardware_concurrency()

    def test_matching_worker_count_accepted(self):
        from src.pathy.core.render import Image, RenderSettings, render
        from src.pathy.core.runtime import pool_size
        from src.pathy.scene.description import Scene

        assert render(Scene(), Image(2, 2), RenderSettings(workers=pool_size())) == 4

    def test_mismatched_worker_count_rejected(self):
        from src.pathy.core.render import Image, RenderSettings, render
        from src.pathy.core.runtime import pool_size
        from src.pathy.scene.description import Scene

        settings = RenderSettings(workers=pool_size() + 1)
        with pytest.raises(ValueError, match="init_runtime"):
            render(Scene(), Image(2, 2), settings)
