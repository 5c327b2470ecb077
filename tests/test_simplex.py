"""Tests for simplex operations and clique complexes."""
import networkx as nx
import pytest

from persistkit import simplex as sx


class TestBasics:
    def test_dimension(self):
        assert sx.dimension([0]) == 0
        assert sx.dimension((0, 1)) == 1
        assert sx.dimension([0, 1, 2]) == 2
        assert sx.dimension([]) == -1

    def test_normalize(self):
        assert sx.normalize([2, 0, 1]) == (0, 1, 2)
        assert sx.normalize([1, 2, 1]) == (1, 2)

    def test_faces_in_removed_vertex_order(self):
        assert sx.faces([0, 1]) == [(1,), (0,)]
        assert sx.faces([0, 1, 2]) == [(1, 2), (0, 2), (0, 1)]
        assert sx.faces([0, 1, 2, 3]) == [(1, 2, 3), (0, 2, 3), (0, 1, 3), (0, 1, 2)]
        assert sx.faces([]) == []

    def test_k_faces(self):
        assert sx.k_faces([0, 1, 2], 0) == [(0,), (1,), (2,)]
        assert sx.k_faces([0, 1, 2], 1) == [(0, 1), (0, 2), (1, 2)]
        assert len(sx.k_faces([0, 1, 2, 3], 1)) == 6
        assert sx.k_faces([0, 1], 3) == []
        assert sx.k_faces([0, 1], -1) == []

    def test_boundary_signs_alternate(self):
        assert sx.boundary([0, 1]) == [(1, (1,)), (-1, (0,))]
        assert sx.boundary([0, 1, 2]) == [(1, (1, 2)), (-1, (0, 2)), (1, (0, 1))]
        assert sx.boundary([]) == []

    def test_is_face(self):
        assert sx.is_face([0, 1], [0, 1, 2])
        assert not sx.is_face([0, 3], [0, 1, 2])
        assert sx.is_face([], [0])


class TestBoundaryOfBoundary:
    @pytest.mark.parametrize("simplex", [
        (0,),
        (0, 1),
        (0, 1, 2),
        (0, 1, 2, 3),
        (2, 5, 7, 11),
        (3, 1, 4),
    ])
    def test_double_boundary_cancels(self, simplex):
        totals = sx.double_boundary(simplex)
        assert all(v == 0 for v in totals.values())

    def test_double_boundary_visits_every_codim2_face(self):
        totals = sx.double_boundary((0, 1, 2, 3))
        assert set(totals) == set(sx.k_faces((0, 1, 2, 3), 1))


class TestCliqueComplex:
    def test_triangle(self):
        g = nx.Graph([(0, 1), (1, 2), (2, 0)])
        complex_ = sx.clique_complex(g)
        assert complex_[0] == [(0,), (1,), (2,)]
        assert complex_[1] == [(0, 1), (0, 2), (1, 2)]
        assert complex_[2] == [(0, 1, 2)]

    def test_complete_graph_counts(self):
        complex_ = sx.clique_complex(nx.complete_graph(4), max_dimension=3)
        assert [len(complex_[d]) for d in range(4)] == [4, 6, 4, 1]

    def test_path_has_no_triangles(self):
        complex_ = sx.clique_complex(nx.path_graph(3), max_dimension=2)
        assert complex_[1] == [(0, 1), (1, 2)]
        assert complex_[2] == []

    def test_empty_layers_are_kept(self):
        g = nx.Graph()
        g.add_nodes_from([0, 1, 2])
        complex_ = sx.clique_complex(g, max_dimension=3)
        assert sorted(complex_) == [0, 1, 2, 3]
        assert complex_[3] == []

    def test_vertices_only(self):
        complex_ = sx.clique_complex(nx.complete_graph(3), max_dimension=0)
        assert complex_ == {0: [(0,), (1,), (2,)]}

    def test_every_clique_is_complete(self):
        g = nx.gnp_random_graph(12, 0.5, seed=3)
        complex_ = sx.clique_complex(g, max_dimension=3)
        for dim in (2, 3):
            for s in complex_[dim]:
                assert all(g.has_edge(u, v) for u, v in sx.k_faces(s, 1))


class TestComplexHelpers:
    def test_all_simplices(self):
        complex_ = {0: [(0,), (1,)], 1: [(0, 1)]}
        assert sx.all_simplices(complex_) == [(0,), (1,), (0, 1)]
        assert sx.all_simplices(complex_, max_dimension=0) == [(0,), (1,)]

    def test_skeleton(self):
        complex_ = {0: [(0,)], 1: [(0, 1)], 2: [(0, 1, 2)]}
        assert sx.skeleton(complex_, 1) == {0: [(0,)], 1: [(0, 1)]}
