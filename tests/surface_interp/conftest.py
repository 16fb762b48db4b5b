from __future__ import annotations
import pytest

import numpy as np
from surface_interp import (
    FieldType,
    SurfaceInterpolator2D,
    SurfaceInterpolator3D,
    config,
)
from surface_interp.triangle import Triangle


@pytest.fixture(autouse=True)
def default_settings():
    """Run each test with settings loaded from a clean environment."""
    config.reset()
    yield
    config.reset()


@pytest.fixture
def unit_triangle():
    """
    Provides a Triangle in the z = 0 plane:
        v0 = [0, 0, 0]
        v1 = [1, 0, 0]
        v2 = [0, 1, 0]
    """
    return Triangle(
        np.array([0.0, 0.0, 0.0]),
        np.array([1.0, 0.0, 0.0]),
        np.array([0.0, 1.0, 0.0]),
    )


@pytest.fixture
def straight_polyline():
    """Polyline (0,0)-(1,0)-(2,0) with field q = [0, 10, 20]."""
    surf = SurfaceInterpolator2D(points=[[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
    surf.set_field("q", [0.0, 10.0, 20.0])
    return surf


@pytest.fixture
def grid_surface():
    """Wavy 8x8 grid surface z = 0.1 sin(x) cos(y) with f = x - y + z."""
    n = 8
    x, y = np.meshgrid(np.linspace(0.0, 2.0, n), np.linspace(0.0, 2.0, n))
    z = 0.1 * np.sin(x) * np.cos(y)
    verts = np.column_stack([x.ravel(), y.ravel(), z.ravel()])
    conn = []
    for j in range(n - 1):
        for i in range(n - 1):
            a = j * n + i
            conn.append([a, a + 1, a + n + 1])
            conn.append([a, a + n + 1, a + n])
    surf = SurfaceInterpolator3D()
    surf.set_mesh(verts, np.array(conn))
    surf.set_field(FieldType.POINT, "f", verts[:, 0] - verts[:, 1] + verts[:, 2])
    surf.convert(FieldType.POINT, "f", FieldType.CELL)
    return surf
