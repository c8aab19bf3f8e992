import numpy as np

from trigrid.edges import triangle_edges, unique_edges


def test_triangle_edges_order():
    edges = triangle_edges([[2, 0, 1]])
    assert edges.tolist() == [[0, 2], [0, 1], [1, 2]]


def test_shared_edge_listed_once():
    edges = unique_edges([[0, 1, 2], [2, 1, 3]])
    assert edges.tolist() == [[0, 1], [0, 2], [1, 2], [1, 3], [2, 3]]


def test_unique_edges_square_with_center():
    tri = np.array([[0, 1, 4], [1, 3, 4], [3, 2, 4], [2, 0, 4]])
    edges = unique_edges(tri)
    assert len(edges) == 8
    assert (edges[:, 0] < edges[:, 1]).all()
    assert len({tuple(e) for e in edges.tolist()}) == 8
    # sorted by (begin, end)
    assert edges.tolist() == sorted(edges.tolist())


def test_no_triangles_no_edges():
    assert unique_edges(np.empty((0, 3), dtype=int)).shape == (0, 2)
