import numpy as np
import pytest
from numpy.testing import assert_allclose

from surface_interp import (
    FieldType,
    SurfaceInterpolator3D,
    UnknownFieldError,
    UnsupportedConversionError,
)


def test_cell_to_point_on_legacy_file(legacy_vtk_file):
    surf = SurfaceInterpolator3D(str(legacy_vtk_file))
    surf.convert(FieldType.CELL, "q", FieldType.POINT, "q")
    # points 0 and 2 are shared, 1 belongs to the first triangle, 3 to the second
    assert_allclose(surf.field(FieldType.POINT, "q"), [2.0, 1.0, 2.0, 3.0])


def test_point_to_cell_is_vertex_mean(two_triangle_square):
    two_triangle_square.convert(FieldType.POINT, "f", FieldType.CELL, "f_cell")
    # f = x + 2y at vertices: [0, 1, 3, 2]
    assert_allclose(
        two_triangle_square.field(FieldType.CELL, "f_cell"), [4.0 / 3.0, 5.0 / 3.0]
    )


def test_target_name_defaults_to_source_name(two_triangle_square):
    two_triangle_square.convert("cell", "q", "point")
    assert "q" in two_triangle_square.field_names(FieldType.POINT)
    assert_allclose(
        two_triangle_square.field(FieldType.POINT, "q"), [2.0, 1.0, 2.0, 3.0]
    )


def test_convert_overwrites_existing_target(two_triangle_square):
    two_triangle_square.set_field(FieldType.CELL, "g", [0.0, 0.0])
    two_triangle_square.convert(FieldType.POINT, "f", FieldType.CELL, "g")
    assert_allclose(two_triangle_square.field(FieldType.CELL, "g"), [4.0 / 3.0, 5.0 / 3.0])


def test_constant_field_round_trip(grid_surface):
    grid_surface.set_field(FieldType.CELL, "c", np.full(grid_surface.n_triangles, 4.2))
    grid_surface.convert(FieldType.CELL, "c", FieldType.POINT)
    assert_allclose(grid_surface.field(FieldType.POINT, "c"), 4.2)
    grid_surface.convert(FieldType.POINT, "c", FieldType.CELL, "c2")
    assert_allclose(grid_surface.field(FieldType.CELL, "c2"), 4.2)


def test_unreferenced_point_gets_zero():
    surf = SurfaceInterpolator3D()
    surf.set_mesh(
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [5, 5, 5]],
        [[0, 1, 2]],
    )
    surf.set_field(FieldType.CELL, "q", [7.0])
    surf.convert(FieldType.CELL, "q", FieldType.POINT)
    assert_allclose(surf.field(FieldType.POINT, "q"), [7.0, 7.0, 7.0, 0.0])


@pytest.mark.parametrize(
    "source, target",
    [(FieldType.CELL, FieldType.CELL), (FieldType.POINT, FieldType.POINT)],
)
def test_same_domain_conversion_is_unsupported(two_triangle_square, source, target):
    name = "q" if source is FieldType.CELL else "f"
    with pytest.raises(UnsupportedConversionError):
        two_triangle_square.convert(source, name, target, "copy")
    with pytest.raises(NotImplementedError):
        two_triangle_square.convert(source, name, target)
    assert "copy" not in two_triangle_square.field_names(target)


def test_unknown_source_field(two_triangle_square):
    with pytest.raises(UnknownFieldError):
        two_triangle_square.convert(FieldType.CELL, "f", FieldType.POINT)
