"""
FAIRING TESTS: End-to-End Behaviour of fair()
=============================================

Scenarios:
1. BOUNDARY: on an open grid, boundary vertices never move
2. CLOSED SURFACE: no boundary and no selection -> precondition failure
3. HARMONIC: for k=1, free vertices satisfy S·X = 0 (S from the input geometry)
4. SELECTION: only selected interior vertices move
5. ISOLATED: isolated vertices keep their exact position for every k
6. BUMP: a raised interior vertex on a flat grid relaxes back to the plane
7. FIXED POINT: a flat regular grid is already optimal for k = 1, 2, 3
"""

import numpy as np
import pytest

from mini_fair import (
    fair,
    minimize_area,
    minimize_curvature,
    FairingConfig,
    FairingResult,
    MissingConstraintsError,
    SingularSystemError,
    ConvergenceError,
    InvalidOrderError,
    ConjugateGradientSolver,
    select_vertices,
)
from mini_fair.surface.laplace import stiffness_matrix
from mini_fair.post import laplace_residual
from mini_fair.generative import (
    GridParams,
    generate_grid,
    generate_octahedron,
    grid_index,
    grid_boundary,
    bump,
)


def bumped_grid(nx=8, ny=8, heightfield='flat', height=0.0, offset=1.0):
    """Grid with its center vertex raised by `offset`."""
    params = GridParams(nx=nx, ny=ny, heightfield=heightfield, height=height)
    mesh = generate_grid(params)
    center = grid_index(nx // 2, ny // 2, nx)
    bump(mesh, [center], offset)
    return mesh, params, center


class TestBoundaryConstraints:

    def test_boundary_unchanged_for_area(self):
        mesh, params, _ = bumped_grid(heightfield='paraboloid', height=0.5)
        boundary = grid_boundary(params)
        before = mesh.points.copy()

        result = fair(mesh, 1)

        np.testing.assert_array_equal(mesh.points[boundary], before[boundary])
        assert result.order == 1
        assert result.locked[boundary].all()

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_locked_vertices_never_move(self, k):
        mesh, _, _ = bumped_grid(heightfield='saddle', height=0.3)
        before = mesh.points.copy()
        result = fair(mesh, k)
        np.testing.assert_array_equal(mesh.points[result.locked], before[result.locked])
        assert result.n_free + result.n_locked == mesh.n_vertices
        assert result.n_free > 0


class TestClosedSurface:

    def test_no_boundary_no_selection_fails(self):
        mesh = generate_octahedron()
        before = mesh.points.copy()
        names = mesh.vertex_property_names()

        with pytest.raises(MissingConstraintsError):
            fair(mesh, 2)

        np.testing.assert_array_equal(mesh.points, before)
        assert mesh.vertex_property_names() == names

    def test_selected_apex_moves_to_ring_center(self):
        mesh = generate_octahedron()
        select_vertices(mesh, [4])

        result = minimize_area(mesh)

        np.testing.assert_allclose(mesh.points[4], [0.0, 0.0, 0.0], atol=1e-12)
        assert result.n_free == 1

    def test_floating_component_is_singular(self):
        # the isolated vertex satisfies the precondition, but the
        # octahedron itself has nothing locked
        mesh = generate_octahedron()
        mesh.add_vertex([3.0, 3.0, 3.0])
        before = mesh.points.copy()
        names = mesh.vertex_property_names()

        with pytest.raises(SingularSystemError):
            fair(mesh, 1)

        np.testing.assert_array_equal(mesh.points, before)
        assert mesh.vertex_property_names() == names


class TestHarmonic:

    def test_free_vertices_satisfy_laplace_equation(self):
        mesh, _, _ = bumped_grid(heightfield='paraboloid', height=0.4, offset=0.7)
        S_before = stiffness_matrix(mesh)

        result = fair(mesh, 1)

        assert laplace_residual(mesh, result.locked, S_before) < 1e-9

    def test_bump_relaxes_to_plane(self):
        mesh, params, center = bumped_grid(offset=1.0)
        boundary = grid_boundary(params)
        before = mesh.points.copy()

        result = fair(mesh, 1)

        free = ~result.locked
        np.testing.assert_allclose(mesh.points[free, 2], 0.0, atol=1e-9)
        np.testing.assert_array_equal(mesh.points[boundary], before[boundary])
        assert result.max_displacement == pytest.approx(1.0, abs=1e-6)
        assert mesh.points[center, 2] == pytest.approx(0.0, abs=1e-9)

    def test_refairing_is_stable(self):
        mesh, _, _ = bumped_grid(offset=0.8)
        fair(mesh, 1)
        first = mesh.points.copy()
        fair(mesh, 1)
        np.testing.assert_allclose(mesh.points[:, 2], first[:, 2], atol=1e-9)

    def test_refairing_curved_surface_drifts_little(self):
        # weights are recomputed from the faired geometry, so a second k=2
        # pass moves free vertices by a few 1e-3, far below the first pass
        mesh, _, _ = bumped_grid(heightfield='saddle', height=0.3, offset=1.0)
        first_result = fair(mesh, 2)
        first = mesh.points.copy()

        second_result = fair(mesh, 2)

        np.testing.assert_allclose(mesh.points, first, atol=2e-2)
        assert second_result.max_displacement < 0.05 * first_result.max_displacement
        np.testing.assert_array_equal(mesh.points[second_result.locked], first[second_result.locked])

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_flat_regular_grid_is_fixed_point(self, k):
        mesh = generate_grid(GridParams(width=2.0, depth=1.0, nx=8, ny=8))
        before = mesh.points.copy()

        fair(mesh, k)
        np.testing.assert_allclose(mesh.points, before, atol=1e-9)

        # a second call is a fixed point as well
        fair(mesh, k)
        np.testing.assert_allclose(mesh.points, before, atol=1e-9)


class TestSelection:

    def test_only_selected_interior_vertices_move(self):
        mesh, params, center = bumped_grid(nx=10, ny=10, offset=0.5)
        block = [grid_index(ix, iy, params.nx) for ix in range(3, 8) for iy in range(3, 8)]
        corner = grid_index(0, 0, params.nx)
        select_vertices(mesh, block + [corner])
        before = mesh.points.copy()

        result = fair(mesh, 1)

        expected_free = np.zeros(mesh.n_vertices, dtype=bool)
        expected_free[block] = True
        np.testing.assert_array_equal(~result.locked, expected_free)
        np.testing.assert_array_equal(mesh.points[~expected_free], before[~expected_free])
        assert mesh.points[center, 2] == pytest.approx(0.0, abs=1e-9)

    def test_custom_selection_property_name(self):
        mesh, params, center = bumped_grid()
        select_vertices(mesh, [center], name="my:selection")
        config = FairingConfig(selection_property="my:selection")

        result = fair(mesh, 1, config=config)

        assert result.n_free == 1
        assert not mesh.has_vertex_property("v:selected")


class TestIsolatedVertices:

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_isolated_vertex_position_preserved(self, k):
        mesh, _, _ = bumped_grid(heightfield='ridge', height=0.2)
        v = mesh.add_vertex([0.123, -4.5, 6.75])
        stored = mesh.position(v)

        result = fair(mesh, k)

        assert result.locked[v]
        np.testing.assert_array_equal(mesh.position(v), stored)


class TestEntryPoints:

    def test_minimize_area_equals_order_one(self):
        mesh_a, _, _ = bumped_grid(heightfield='saddle', height=0.3)
        mesh_b = mesh_a.copy()
        minimize_area(mesh_a)
        fair(mesh_b, 1)
        np.testing.assert_array_equal(mesh_a.points, mesh_b.points)

    def test_minimize_curvature_equals_order_two(self):
        mesh_a, _, _ = bumped_grid(heightfield='saddle', height=0.3)
        mesh_b = mesh_a.copy()
        result = minimize_curvature(mesh_a)
        fair(mesh_b, 2)
        np.testing.assert_array_equal(mesh_a.points, mesh_b.points)
        assert isinstance(result, FairingResult)
        assert result.order == 2

    @pytest.mark.parametrize("k", [0, -1, 1.5, True, "2"])
    def test_invalid_order_rejected(self, k):
        mesh, _, _ = bumped_grid()
        before = mesh.points.copy()
        with pytest.raises(InvalidOrderError):
            fair(mesh, k)
        np.testing.assert_array_equal(mesh.points, before)

    def test_invalid_order_is_value_error(self):
        assert issubclass(InvalidOrderError, ValueError)

    def test_numpy_integer_order_accepted(self):
        mesh, _, _ = bumped_grid()
        assert fair(mesh, np.int64(2)).order == 2

    def test_unknown_solver_rejected_before_work(self):
        mesh, _, _ = bumped_grid()
        before = mesh.points.copy()
        with pytest.raises(ValueError, match="Unknown solver"):
            fair(mesh, 1, solver="gauss-seidel")
        np.testing.assert_array_equal(mesh.points, before)

    def test_no_property_left_behind(self):
        mesh, _, _ = bumped_grid()
        names = mesh.vertex_property_names()
        fair(mesh, 2)
        assert mesh.vertex_property_names() == names


class TestSolverBackends:

    @pytest.mark.parametrize("k", [1, 2])
    def test_cg_matches_direct(self, k):
        mesh_a, _, _ = bumped_grid(heightfield='paraboloid', height=0.5, offset=0.3)
        mesh_b = mesh_a.copy()

        result_a = fair(mesh_a, k, solver='direct')
        result_b = fair(mesh_b, k, solver=ConjugateGradientSolver(rtol=1e-12))

        assert result_a.solver == 'direct'
        assert result_b.solver == 'cg'
        np.testing.assert_allclose(mesh_a.points, mesh_b.points, atol=1e-6)

    def test_cg_non_convergence_leaves_mesh_untouched(self):
        mesh, _, center = bumped_grid(offset=0.5)
        bump(mesh, [center], [0.1, 0.05, 0.0])
        before = mesh.points.copy()

        with pytest.raises(ConvergenceError):
            fair(mesh, 2, solver=ConjugateGradientSolver(rtol=1e-14, maxiter=1))

        np.testing.assert_array_equal(mesh.points, before)


def test_ring_cap_configurable():
    mesh, params, _ = bumped_grid(nx=10, ny=10)
    result = fair(mesh, 3, config=FairingConfig(max_boundary_rings=0))
    np.testing.assert_array_equal(result.locked, mesh.boundary_mask())


class TestTwoStepModes:

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_normalized_operator_has_same_minimizer(self, k):
        mesh_a, _, _ = bumped_grid(heightfield='paraboloid', height=0.5, offset=0.6)
        mesh_b = mesh_a.copy()

        fair(mesh_a, k)
        fair(mesh_b, k, config=FairingConfig(two_step=False))

        np.testing.assert_allclose(mesh_b.points, mesh_a.points, atol=1e-8)

    def test_cg_rejects_normalized_operator(self):
        mesh, _, _ = bumped_grid(heightfield='paraboloid', height=0.5)
        before = mesh.points.copy()
        config = FairingConfig(two_step=False, solver='cg')

        with pytest.raises(ValueError, match="symmetric"):
            fair(mesh, 1, config=config)

        np.testing.assert_array_equal(mesh.points, before)
