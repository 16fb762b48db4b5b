import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from surface_interp import (
    FieldType,
    InterpolationFailedError,
    KDTreePruner,
    SurfaceInterpolator3D,
    UnknownFieldError,
)


@pytest.fixture
def xz_square():
    """Unit square in the y = 0 plane with f = x + 2z and q = [1, 3]."""
    verts = np.array(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 0.0, 1.0], [0.0, 0.0, 1.0]]
    )
    surf = SurfaceInterpolator3D()
    surf.set_mesh(verts, [[0, 1, 2], [0, 2, 3]])
    surf.set_field(FieldType.POINT, "f", verts[:, 0] + 2.0 * verts[:, 2])
    surf.set_field(FieldType.CELL, "q", [1.0, 3.0])
    return surf


def test_cell_field_takes_value_of_closest_triangle(two_triangle_square):
    out = two_triangle_square.interpolate(
        FieldType.CELL, "q", [[0.75, 0.25, 0.5], [0.25, 0.75, -1.0]]
    )
    assert_allclose(out, [1.0, 3.0])


def test_point_field_barycentric_blend(two_triangle_square):
    out = two_triangle_square.interpolate(FieldType.POINT, "f", [[0.3, 0.6, 0.2]])
    assert_allclose(out, [1.5])


def test_point_outside_surface_uses_closest_edge_point(two_triangle_square):
    out = two_triangle_square.interpolate(FieldType.POINT, "f", [[2.0, 0.5, 0.0]])
    assert_allclose(out, [2.0])


def test_linear_field_reproduced_on_curved_grid(grid_surface):
    verts = grid_surface.points
    f = grid_surface.field(FieldType.POINT, "f")
    out = grid_surface.interpolate(FieldType.POINT, "f", verts)
    assert_allclose(out, f, atol=1e-12)


def test_axisymmetric_targets_map_to_y_zero_plane(xz_square):
    out = xz_square.interpolate(FieldType.POINT, "f", [[0.3, 0.6], [1.0, 0.5]])
    assert_allclose(out, [1.5, 2.0])
    out = xz_square.interpolate("cell", "q", np.array([[0.75, 0.25], [0.25, 0.75]]))
    assert_allclose(out, [1.0, 3.0])


def test_markers(two_triangle_square):
    pts = [[0.75, 0.25, 0.0], [0.25, 0.75, 0.0], [0.1, 0.9, 0.0]]
    out = two_triangle_square.interpolate(
        FieldType.CELL, "q", pts, markers=[True, False, True]
    )
    assert_allclose(out, [1.0, 0.0, 3.0])


def test_target_values_filled_in_place(two_triangle_square):
    buf = np.full(2, 7.0)
    out = two_triangle_square.interpolate(
        FieldType.CELL,
        "q",
        [[0.75, 0.25, 0.0], [0.25, 0.75, 0.0]],
        markers=np.array([True, False]),
        target_values=buf,
    )
    assert out is buf
    assert_allclose(buf, [1.0, 0.0])


def test_target_values_wrong_shape(two_triangle_square):
    with pytest.raises(ValueError):
        two_triangle_square.interpolate(
            FieldType.CELL, "q", [[0.0, 0.0, 0.0]], target_values=np.zeros(3)
        )


def test_all_false_markers_on_empty_mesh():
    surf = SurfaceInterpolator3D()
    surf.set_field(FieldType.CELL, "q", [])
    out = surf.interpolate(
        FieldType.CELL, "q", [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]], markers=[False, False]
    )
    assert_allclose(out, [0.0, 0.0])


def test_active_point_on_empty_mesh_raises():
    surf = SurfaceInterpolator3D()
    surf.set_field(FieldType.CELL, "q", [])
    with pytest.raises(InterpolationFailedError) as exc:
        surf.interpolate(FieldType.CELL, "q", [[1.0, 2.0, 3.0]])
    assert exc.value.point == (1.0, 2.0, 3.0)
    assert "(1 2 3)" in str(exc.value)


def test_unknown_field_raises_before_search(two_triangle_square):
    with pytest.raises(UnknownFieldError):
        two_triangle_square.interpolate(FieldType.POINT, "q", [[0.0, 0.0, 0.0]])


def test_empty_target_set(two_triangle_square):
    out = two_triangle_square.interpolate(FieldType.CELL, "q", np.empty((0, 3)))
    assert out.shape == (0,)


def test_bad_target_shape(two_triangle_square):
    with pytest.raises(ValueError):
        two_triangle_square.interpolate(FieldType.CELL, "q", [[0.0, 0.0, 0.0, 0.0]])


def test_per_call_pruner_agrees_with_default(grid_surface):
    rng = np.random.default_rng(3)
    pts = np.column_stack(
        [rng.uniform(-0.5, 2.5, 40), rng.uniform(-0.5, 2.5, 40), rng.uniform(-1, 1, 40)]
    )
    ref = grid_surface.interpolate(FieldType.CELL, "f", pts)
    out = grid_surface.interpolate(FieldType.CELL, "f", pts, pruner=KDTreePruner())
    assert_allclose(out, ref)


def test_far_points_found_by_full_search(two_triangle_square):
    out = two_triangle_square.interpolate(
        FieldType.CELL, "q", [[100.0, 0.1, 0.0], [-0.1, 100.0, 0.0]]
    )
    assert_allclose(out, [1.0, 3.0])


def test_point_field_on_micro_scale_triangle(caplog):
    s = 1e-7
    surf = SurfaceInterpolator3D()
    with caplog.at_level(logging.WARNING, logger="surface_interp"):
        surf.set_mesh([[0.0, 0.0, 0.0], [s, 0.0, 0.0], [0.0, s, 0.0]], [[0, 1, 2]])
    assert "degenerate" not in caplog.text

    surf.set_field(FieldType.POINT, "f", [0.0, 0.0, 1.0])
    out = surf.interpolate(FieldType.POINT, "f", [[0.2 * s, 0.5 * s, 0.0]])
    assert_allclose(out, [0.5])
