import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from surface_interp import (
    FieldType,
    FormatError,
    SurfaceInterpolator3D,
    UnknownFieldError,
)


def test_derived_fields_after_set_mesh(two_triangle_square):
    s = two_triangle_square
    assert s.n_points == 4
    assert s.n_triangles == 2
    assert s.field_names(FieldType.CELL) == ["area", "longest_side", "q"]
    assert s.field_names("point") == ["f"]
    assert s.vector_field_names() == ["center", "normal"]

    assert_allclose(s.field(FieldType.CELL, "area"), [0.5, 0.5])
    assert_allclose(s.field(FieldType.CELL, "longest_side"), [np.sqrt(2.0)] * 2)
    assert_allclose(
        s.vector_field("center"), [[2.0 / 3.0, 1.0 / 3.0, 0.0], [1.0 / 3.0, 2.0 / 3.0, 0.0]]
    )
    assert_allclose(s.vector_field("normal"), [[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])


def test_triangle_cache_matches_connectivity(two_triangle_square):
    cache = two_triangle_square.triangle_cache
    assert len(cache) == 2
    assert_allclose(cache[1].points, [[0, 0, 0], [1, 1, 0], [0, 1, 0]])


def test_accessors_return_copies(two_triangle_square):
    s = two_triangle_square
    pts = s.points
    pts[:] = 9.0
    tris = s.triangles
    tris[:] = 0
    q = s.field(FieldType.CELL, "q")
    q[:] = -1.0
    normal = s.vector_field("normal")
    normal[:] = 0.0

    assert_allclose(s.points[2], [1.0, 1.0, 0.0])
    assert s.triangles.tolist() == [[0, 1, 2], [0, 2, 3]]
    assert_allclose(s.field(FieldType.CELL, "q"), [1.0, 3.0])
    assert_allclose(s.vector_field("normal")[0], [0.0, 0.0, 1.0])


def test_set_mesh_clears_fields(two_triangle_square):
    s = two_triangle_square
    s.set_mesh([[0, 0, 0], [1, 0, 0], [0, 0, 1]], [[0, 1, 2]])
    assert s.n_triangles == 1
    assert "q" not in s.field_names(FieldType.CELL)
    assert s.field_names(FieldType.POINT) == []
    assert_allclose(s.vector_field("normal"), [[0.0, -1.0, 0.0]])


def test_set_mesh_index_out_of_range(two_triangle_square):
    with pytest.raises(FormatError, match="out of range"):
        two_triangle_square.set_mesh(np.zeros((3, 3)), [[0, 1, 3]])


def test_set_mesh_wrong_shape():
    with pytest.raises(FormatError):
        SurfaceInterpolator3D().set_mesh(np.zeros((3, 2)), [[0, 1, 2]])
    with pytest.raises(FormatError):
        SurfaceInterpolator3D().set_mesh(np.zeros((4, 3)), [[0, 1, 2, 3]])


def test_set_field_length_mismatch(two_triangle_square):
    with pytest.raises(FormatError, match="expected 2"):
        two_triangle_square.set_field(FieldType.CELL, "bad", [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        two_triangle_square.set_field(FieldType.POINT, "bad", [1.0])


def test_set_field_overwrites(two_triangle_square):
    two_triangle_square.set_field("cell", "q", [5.0, 6.0])
    assert_allclose(two_triangle_square.field("cell", "q"), [5.0, 6.0])


def test_unknown_field(two_triangle_square):
    with pytest.raises(UnknownFieldError) as exc:
        two_triangle_square.field(FieldType.POINT, "q")
    assert exc.value.field_name == "q"
    assert exc.value.domain == "point"
    assert str(exc.value) == "Field 'q' does not exist in point fields."

    with pytest.raises(KeyError):
        two_triangle_square.vector_field("velocity")


def test_point_vector_fields_not_supported(two_triangle_square):
    with pytest.raises(NotImplementedError):
        two_triangle_square.vector_field("normal", FieldType.POINT)


def test_invalid_field_type(two_triangle_square):
    with pytest.raises(ValueError, match="Unknown field type"):
        two_triangle_square.field("edge", "q")


def test_clear(two_triangle_square):
    two_triangle_square.clear()
    assert two_triangle_square.n_points == 0
    assert two_triangle_square.n_triangles == 0
    assert two_triangle_square.field_names(FieldType.CELL) == []
    assert two_triangle_square.triangle_cache == ()


class _RecordingPruner:
    def __init__(self):
        self.prepared = []
        self._n = 0

    def prepare(self, triangles):
        self.prepared.append(len(triangles))
        self._n = len(triangles)

    def candidates(self, point):
        return np.arange(self._n)


def test_pruner_prepared_on_preprocess_and_after_swap(two_triangle_square):
    pruner = _RecordingPruner()
    surf = SurfaceInterpolator3D(pruner=pruner)
    surf.set_mesh(two_triangle_square.points, two_triangle_square.triangles)
    assert pruner.prepared == [2]

    other = _RecordingPruner()
    surf.pruner = other
    assert other.prepared == []
    surf.set_field(FieldType.CELL, "q", [1.0, 3.0])
    assert_allclose(surf.interpolate("cell", "q", [[0.9, 0.1, 0.0]]), [1.0])
    assert other.prepared == [2]


def test_degenerate_triangle_is_reported(caplog):
    surf = SurfaceInterpolator3D()
    with caplog.at_level(logging.WARNING, logger="surface_interp"):
        surf.set_mesh(
            [[0, 0, 0], [1, 0, 0], [2, 0, 0], [0, 1, 0]], [[0, 1, 2], [0, 1, 3]]
        )
    assert "1 degenerate triangle(s)" in caplog.text
    assert_allclose(surf.field(FieldType.CELL, "area"), [0.0, 0.5])


def test_repr(two_triangle_square):
    text = repr(two_triangle_square)
    assert "n_points=4" in text
    assert "n_triangles=2" in text
    assert "'q'" in text
