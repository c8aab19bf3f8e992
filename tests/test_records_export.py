import io
import json
import numpy as np
import pytest

from trigrid.errors import InputError, NoDataError
from trigrid.export import edge_segments, index_rows, mesh_to_dict, write_mesh_json, write_segments
from trigrid.models import Points
from trigrid.records import n_input_columns, read_table


def test_read_table_skips_comments_and_headers():
    text = "# x y z\n0 0 1\n> segment\n\n4,0,2\n0 4 3 99\n"
    table = read_table(io.StringIO(text), 3)
    np.testing.assert_array_equal(table, [[0, 0, 1], [4, 0, 2], [0, 4, 3]])


def test_read_table_from_path(tmp_path):
    path = tmp_path / "pts.txt"
    path.write_text("1 2\n3 4\n")
    assert read_table(str(path), 2).shape == (2, 2)


def test_read_table_missing_file(tmp_path):
    with pytest.raises(InputError, match="missing.txt"):
        read_table(str(tmp_path / "missing.txt"), 2)


def test_read_table_too_few_columns():
    with pytest.raises(InputError, match="expected 3 numeric columns"):
        read_table(io.StringIO("0 0\n1 1\n"), 3)


def test_read_empty_table():
    assert read_table(io.StringIO("# nothing\n"), 3).shape == (0, 3)


@pytest.mark.parametrize("has_z, has_unc, n", [(False, False, 2), (True, False, 3), (False, True, 4), (True, True, 5)])
def test_column_counts(has_z, has_unc, n):
    assert n_input_columns(has_z, has_unc) == n


def test_points_layouts():
    p = Points.from_records([(0, 0, -1.0, -2.0), (1, 0, 3.0, 4.0), (0, 1, 5.0, 6.0)])
    assert not p.has_z and p.has_uncertainty
    assert p.h.tolist() == [1.0, 3.0, 5.0]
    assert p.v.tolist() == [2.0, 4.0, 6.0]

    p = Points.from_columns([[0, 0, 7.0, 1.0, 2.0]], has_z=True, has_uncertainty=True)
    assert p.z.tolist() == [7.0]


def test_points_validation():
    with pytest.raises(NoDataError):
        Points.from_records([])
    with pytest.raises(ValueError):
        Points.from_records([(0, 0), (1, 1, 1)])
    with pytest.raises(ValueError):
        Points([0.0, 1.0], [0.0])
    with pytest.raises(ValueError):
        Points([0.0], [0.0], h=[1.0])


def test_points_are_read_only(plane_points):
    with pytest.raises(ValueError):
        plane_points.x[0] = 99.0


def test_write_segments(plane_points):
    out = io.StringIO()
    edges = np.array([[0, 4]])
    n = write_segments(list(edge_segments(plane_points, edges, with_z=True)) + list(index_rows([[0, 1, 4]])), out)
    assert n == 3
    assert out.getvalue() == "> Edge 0-4\n0\t0\t1\n2\t2\t11\n0\t1\t4\n"


def test_write_segments_to_path(tmp_path, plane_points):
    path = tmp_path / "edges.txt"
    assert write_segments(edge_segments(plane_points, np.array([[1, 3]])), str(path)) == 2
    assert path.read_text().splitlines() == ["> Edge 1-3", "4\t0", "4\t4"]


def test_mesh_json(tmp_path, plane_points):
    tri = np.array([[0, 1, 4]])
    doc = mesh_to_dict(plane_points, tri)
    assert doc["vertices"][4] == [2.0, 2.0, 11.0]
    assert "edges" not in doc

    path = tmp_path / "mesh.json"
    write_mesh_json(plane_points, tri, str(path), edges=np.array([[0, 1]]))
    loaded = json.loads(path.read_text())
    assert loaded["triangles"] == [[0, 1, 4]]
    assert loaded["edges"] == [[0, 1]]
