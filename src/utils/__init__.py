"""The utils package contains the mesh file readers and writers used by surface_interp.

Submodules:
  - mesh_data: Containers returned by the readers.
  - paraview_writer: VTUWriter for triangle surfaces and line meshes.
  - txt_reader: TXTReader for polyline text tables.
  - vtk_reader: VTKLegacyReader for legacy ASCII VTK files.
  - vtu_reader: VTUReader for ASCII VTK XML unstructured grids.

Utilities:
  SurfaceMeshData, PolylineData, VTUWriter, TXTReader, VTKLegacyReader, VTUReader
"""

from utils.mesh_data import PolylineData, SurfaceMeshData
from utils.paraview_writer import VTUWriter
from utils.txt_reader import TXTReader
from utils.vtk_reader import VTKLegacyReader
from utils.vtu_reader import VTUReader

__all__ = [
    "PolylineData",
    "SurfaceMeshData",
    "VTUWriter",
    "TXTReader",
    "VTKLegacyReader",
    "VTUReader",
]
