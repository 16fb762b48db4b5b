"""Transfer boundary values from external surface data onto query points.

Builds a triangulated cylinder with a cell field ``q``, converts it to a
point field, writes the surface to ``q.vtu`` and interpolates ``q`` at
points on a slightly larger ring. The same is then done for an axisymmetric
(r, z) polyline written as ``q-2d.txt``.

Run:
    python examples/interpolate_boundary.py
"""
import logging

import numpy as np

from surface_interp import (
    FieldType,
    KDTreePruner,
    SurfaceInterpolator2D,
    SurfaceInterpolator3D,
)


def cylinder(radius=0.1, height=0.5, n_phi=32, n_z=10):
    phi = np.linspace(0.0, 2.0 * np.pi, n_phi, endpoint=False)
    z = np.linspace(0.0, height, n_z)
    points = np.array(
        [[radius * np.cos(p), radius * np.sin(p), zz] for zz in z for p in phi]
    )
    triangles = []
    for k in range(n_z - 1):
        for i in range(n_phi):
            a = k * n_phi + i
            b = k * n_phi + (i + 1) % n_phi
            triangles.append([a, b, a + n_phi])
            triangles.append([b, b + n_phi, a + n_phi])
    return points, np.array(triangles)


def main():
    logging.basicConfig(level=logging.INFO)

    points, triangles = cylinder()
    surf = SurfaceInterpolator3D(pruner=KDTreePruner())
    surf.set_mesh(points, triangles)

    centers = surf.vector_field("center")
    surf.set_field(FieldType.CELL, "q", 1e3 * (1.0 + centers[:, 2]))
    surf.convert(FieldType.CELL, "q", FieldType.POINT, "q")
    surf.convert(FieldType.POINT, "q", FieldType.CELL, "q_from_point")
    surf.write_vtu("q.vtu")

    phi = np.linspace(0.0, 2.0 * np.pi, 12, endpoint=False)
    targets = np.column_stack([0.11 * np.cos(phi), 0.11 * np.sin(phi), 0.25 * np.ones(12)])
    markers = np.ones(len(targets), dtype=bool)
    markers[::3] = False
    q = surf.interpolate(FieldType.POINT, "q", targets, markers)
    print("3D:", np.round(q, 3))

    with open("q-2d.txt", "w") as f:
        f.write("r z q\n")
        for zz in np.linspace(0.0, 0.5, 11):
            f.write(f"0.1 {zz} {1e3 * (1.0 + zz)}\n")

    surf2 = SurfaceInterpolator2D("q-2d.txt")
    q2 = surf2.interpolate("q", targets, markers)
    print("2D:", np.round(q2, 3))


if __name__ == "__main__":
    main()
