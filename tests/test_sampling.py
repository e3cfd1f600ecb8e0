"""Unit tests for Monte Carlo sampling routines.

Tests cover:
- Orthonormal basis construction
- Uniform sphere directions
- Visible-sphere (cone) sampling of spherical lights
"""

import math

import pytest
import taichi as ti


class TestOrthonormalBasis:
    """Tests for build_orthonormal_basis and local_to_world."""

    @pytest.mark.parametrize(
        "w",
        [
            (0.0, 0.0, 1.0),
            (1.0, 0.0, 0.0),
            (0.0, -1.0, 0.0),
            (0.48, 0.6, -0.64),
        ],
    )
    def test_basis_is_orthonormal_and_right_handed(self, w):
        """Test u, v, w are unit, orthogonal and cross(u, v) == w."""
        from src.pathy.core.sampling import build_orthonormal_basis, vec3

        u_out = ti.field(dtype=ti.math.vec3, shape=())
        v_out = ti.field(dtype=ti.math.vec3, shape=())
        w_out = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
            u, v, ww = build_orthonormal_basis(ti.math.normalize(vec3(x, y, z)))
            u_out[None] = u
            v_out[None] = v
            w_out[None] = ww

        test_kernel(*w)
        u = u_out[None].to_numpy()
        v = v_out[None].to_numpy()
        ww = w_out[None].to_numpy()

        for axis in (u, v, ww):
            assert abs(float((axis**2).sum()) - 1.0) < 1e-5
        assert abs(float((u * v).sum())) < 1e-5
        assert abs(float((u * ww).sum())) < 1e-5
        assert abs(float((v * ww).sum())) < 1e-5

        cross = [
            u[1] * v[2] - u[2] * v[1],
            u[2] * v[0] - u[0] * v[2],
            u[0] * v[1] - u[1] * v[0],
        ]
        for c, expected in zip(cross, ww):
            assert abs(c - expected) < 1e-5

    def test_local_to_world_maps_z_to_w(self):
        """Test the local +Z axis maps onto w."""
        from src.pathy.core.sampling import build_orthonormal_basis, local_to_world, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            u, v, w = build_orthonormal_basis(vec3(0.0, 1.0, 0.0))
            result[None] = local_to_world(vec3(0.0, 0.0, 2.0), u, v, w)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2]) < 1e-6


class TestUniformSphere:
    """Tests for uniform sphere direction sampling."""

    def test_pdf_constant(self):
        """Test the uniform sphere pdf is 1 / (4 pi)."""
        from src.pathy.core.sampling import UNIFORM_SPHERE_PDF

        assert abs(UNIFORM_SPHERE_PDF - 1.0 / (4.0 * math.pi)) < 1e-9

    def test_inverse_cdf_poles(self):
        """Test u2 = 0 maps to +Z and u2 = 0.5 to the equator."""
        from src.pathy.core.sampling import uniform_sphere_direction

        results = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            results[0] = uniform_sphere_direction(0.3, 0.0)
            results[1] = uniform_sphere_direction(0.0, 0.5)

        test_kernel()
        pole = results[0]
        assert abs(pole[2] - 1.0) < 1e-6
        equator = results[1]
        assert abs(equator[0] - 1.0) < 1e-6
        assert abs(equator[2]) < 1e-6

    def test_samples_unit_length_and_centered(self):
        """Test random directions are unit length with a mean near zero."""
        from src.pathy.core.sampling import sample_uniform_sphere

        n = 20000
        samples = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = sample_uniform_sphere()

        test_kernel()
        arr = samples.to_numpy()
        lengths = (arr**2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-4
        mean = arr.mean(axis=0)
        assert abs(mean).max() < 0.03


class TestVisibleSphere:
    """Tests for sampling points on the visible cap of a spherical light."""

    def test_center_of_cone_hits_nearest_point(self):
        """Test u1 = 0 gives the point on the light closest to the viewer."""
        from src.pathy.core.sampling import vec3, visible_sphere_point

        valid = ti.field(dtype=ti.i32, shape=())
        point = ti.field(dtype=ti.math.vec3, shape=())
        pdf = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ok, p, density = visible_sphere_point(
                vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -5.0), 1.0, 0.0, 0.25
            )
            valid[None] = ok
            point[None] = p
            pdf[None] = density

        test_kernel()
        assert valid[None] == 1
        p = point[None]
        assert abs(p[0]) < 1e-4
        assert abs(p[1]) < 1e-4
        assert abs(p[2] + 4.0) < 1e-4

        cos_theta_max = math.sqrt(1.0 - 1.0 / 25.0)
        expected_pdf = 1.0 / (2.0 * math.pi * (1.0 - cos_theta_max))
        assert abs(pdf[None] - expected_pdf) / expected_pdf < 1e-3

    def test_samples_lie_on_visible_cap(self):
        """Test samples are on the sphere and face the reference point."""
        from src.pathy.core.sampling import vec3, visible_sphere_point

        n = 8
        valid = ti.field(dtype=ti.i32, shape=(n, n))
        distance = ti.field(dtype=ti.f32, shape=(n, n))
        facing = ti.field(dtype=ti.f32, shape=(n, n))

        @ti.kernel
        def test_kernel():
            reference = vec3(0.5, -1.0, 2.0)
            center = vec3(1.0, 2.0, -3.0)
            radius = 1.5
            for i, j in ti.ndrange(n, n):
                u1 = (ti.cast(i, ti.f32) + 0.5) / n
                u2 = (ti.cast(j, ti.f32) + 0.5) / n
                ok, p, _ = visible_sphere_point(reference, center, radius, u1, u2)
                valid[i, j] = ok
                distance[i, j] = ti.math.length(p - center)
                facing[i, j] = ti.math.dot(p - center, reference - p)

        test_kernel()
        assert (valid.to_numpy() == 1).all()
        assert abs(distance.to_numpy() - 1.5).max() < 1e-3
        assert (facing.to_numpy() > -1e-3).all()

    @pytest.mark.parametrize(
        "reference, radius",
        [
            ((0.0, 0.0, 0.0), 2.0),  # inside the light
            ((0.0, 0.0, 5.0), 0.0),  # zero radius
        ],
    )
    def test_invalid_configurations(self, reference, radius):
        """Test sampling is rejected from inside the light or for r = 0."""
        from src.pathy.core.sampling import vec3, visible_sphere_point

        valid = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32, r: ti.f32):
            ok, _, _ = visible_sphere_point(vec3(x, y, z), vec3(0.0, 0.0, 0.0), r, 0.5, 0.5)
            valid[None] = ok

        test_kernel(*reference, radius)
        assert valid[None] == 0
