import numpy as np
import pytest
from numpy.testing import assert_allclose

from utils.mesh_data import MeshFormatError
from utils.paraview_writer import VTUWriter
from utils.vtu_reader import VTUReader


@pytest.fixture
def vtu_file(tmp_path):
    filename = str(tmp_path / "surface.vtu")
    VTUWriter.write_triangle_vtu(
        np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]),
        np.array([[0, 1, 2], [0, 2, 3]]),
        filename,
        cell_fields={"q": np.array([1.0, 3.0])},
        cell_vector_fields={"center": np.array([[0.6, 0.3, 0.0], [0.3, 0.6, 0.0]])},
        point_fields={"f": np.array([0.0, 1.0, 3.0, 2.0])},
    )
    return filename


def test_reads_writer_output(vtu_file):
    data = VTUReader.read(vtu_file)
    assert data.points.shape == (4, 3)
    assert data.triangles.tolist() == [[0, 1, 2], [0, 2, 3]]
    assert_allclose(data.cell_fields["q"], [1.0, 3.0])
    assert_allclose(data.cell_vector_fields["center"], [[0.6, 0.3, 0.0], [0.3, 0.6, 0.0]])
    assert_allclose(data.point_fields["f"], [0.0, 1.0, 3.0, 2.0])


def test_point_data_length_mismatch(vtu_file):
    with open(vtu_file) as f:
        text = f.read()
    # drop the last value of f
    text = text.replace("3.00000000000000e+00 2.00000000000000e+00\n", "3.00000000000000e+00\n")
    with open(vtu_file, "w") as f:
        f.write(text)
    with pytest.raises(MeshFormatError, match="<PointData> f has 3 values, expected 4"):
        VTUReader.read(vtu_file)


def test_binary_arrays_rejected(vtu_file):
    with open(vtu_file) as f:
        text = f.read()
    with open(vtu_file, "w") as f:
        f.write(text.replace('Name="q" format="ascii"', 'Name="q" format="binary"'))
    with pytest.raises(MeshFormatError, match="unsupported format"):
        VTUReader.read(vtu_file)


def test_not_a_vtu(tmp_path):
    path = tmp_path / "bad.vtu"
    path.write_text("<VTKFile type='PolyData'/>")
    with pytest.raises(MeshFormatError, match="UnstructuredGrid"):
        VTUReader.read(str(path))


def test_invalid_xml(tmp_path):
    path = tmp_path / "bad.vtu"
    path.write_text("<VTKFile")
    with pytest.raises(MeshFormatError, match="invalid XML"):
        VTUReader.read(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        VTUReader.read(str(tmp_path / "missing.vtu"))


def test_invalid_number_of_components(vtu_file):
    with open(vtu_file) as f:
        text = f.read()
    with open(vtu_file, "w") as f:
        f.write(text.replace('NumberOfComponents="3"', 'NumberOfComponents="three"', 1))
    with pytest.raises(MeshFormatError, match="invalid NumberOfComponents"):
        VTUReader.read(vtu_file)
