"""Tests for diagram statistics, filtering, distances and landscapes."""
import math

import numpy as np
import pytest

from persistkit import diagram as dg
from persistkit.diagram import Diagram
from persistkit.errors import InputError

INF = math.inf


def _random_diagram(rng, size):
    births = rng.uniform(0, 1, size=size)
    deaths = births + rng.uniform(0, 1, size=size)
    return Diagram(1, tuple(zip(births, deaths)))


class TestDiagram:
    def test_pairs_are_tuples_of_floats(self):
        d = Diagram(0, [(0, 1), (0, INF)])
        assert d.pairs == ((0.0, 1.0), (0.0, INF))
        assert len(d) == 2

    def test_death_before_birth_rejected(self):
        with pytest.raises(InputError):
            Diagram(1, [(2.0, 1.0)])

    def test_same_dimension(self):
        assert dg.same_dimension(Diagram(1), Diagram(1))
        assert not dg.same_dimension(Diagram(0), Diagram(1))


class TestStatistics:
    def test_persistences(self):
        assert dg.persistences(Diagram(1, [(0.0, 1.0), (0.5, 2.0)])) == [1.0, 1.5]
        assert dg.persistences(Diagram(0, [(0.0, INF)])) == [INF]

    def test_total_persistence(self):
        assert dg.total_persistence(Diagram(1, [(0.0, 1.0), (0.5, 2.0)])) == 2.5
        assert dg.total_persistence(Diagram(0, [(0.0, INF), (0.0, 1.0)])) == 1.0

    def test_entropy(self):
        h = dg.entropy(Diagram(1, [(0.0, 1.0), (0.0, 2.0)]))
        expected = -(1 / 3 * math.log(1 / 3) + 2 / 3 * math.log(2 / 3))
        assert h == pytest.approx(expected)

    def test_entropy_guards(self):
        assert dg.entropy(Diagram(1)) == 0.0
        assert dg.entropy(Diagram(1, [(1.0, 1.0), (2.0, 2.0)])) == 0.0
        assert dg.entropy(Diagram(0, [(0.0, INF)])) == 0.0
        assert dg.entropy(Diagram(1, [(0.0, 3.0)])) == 0.0

    def test_summary(self):
        d = Diagram(1, [(0.0, 1.0), (0.5, 2.0), (1.0, 1.0), (0.0, INF)])
        stats = dg.summary_statistics(d)
        assert stats.count == 4
        assert stats.finite_count == 3
        assert stats.infinite_count == 1
        assert stats.total_persistence == 2.5
        assert stats.max_persistence == 1.5
        assert stats.mean_persistence == 1.25
        assert stats.entropy == pytest.approx(dg.entropy(d))
        assert stats.as_dict()["count"] == 4

    def test_summary_of_empty(self):
        stats = dg.summary_statistics(Diagram(0))
        assert stats.count == 0
        assert stats.mean_persistence == 0.0
        assert stats.max_persistence == 0.0


class TestFilter:
    def test_min(self):
        d = Diagram(1, [(0.0, 0.1), (0.0, 1.0), (0.5, 2.0)])
        assert len(dg.filter_by_persistence(d, min_persistence=0.5)) == 2

    def test_range(self):
        d = Diagram(1, [(0.0, 0.1), (0.0, 1.0), (0.5, 2.0)])
        assert dg.filter_by_persistence(d, 0.5, 1.2).pairs == ((0.0, 1.0),)

    def test_infinite_points_need_unbounded_max(self):
        d = Diagram(0, [(0.0, INF), (0.0, 1.0)])
        assert dg.filter_by_persistence(d).pairs == ((0.0, INF), (0.0, 1.0))
        assert dg.filter_by_persistence(d, max_persistence=5.0).pairs == ((0.0, 1.0),)


class TestDistances:
    def test_known_values(self):
        d1 = Diagram(1, [(0.0, 1.0)])
        d2 = Diagram(1, [(0.0, 1.1)])
        assert dg.bottleneck_distance(d1, d2) == pytest.approx(0.55)
        expected = math.sqrt((0.1 ** 2 + 0.5 ** 2 + 0.55 ** 2 + 0.05 ** 2) / 4)
        assert dg.wasserstein_distance(d1, d2, p=2) == pytest.approx(expected)

    def test_empty(self):
        assert dg.bottleneck_distance(Diagram(1), Diagram(1)) == 0.0
        assert dg.wasserstein_distance(Diagram(1), Diagram(1)) == 0.0

    def test_one_side_empty(self):
        d = Diagram(1, [(0.0, 2.0)])
        assert dg.bottleneck_distance(d, Diagram(1)) == pytest.approx(1.0)

    @pytest.mark.parametrize("seed", range(10))
    def test_symmetric_and_non_negative(self, seed):
        rng = np.random.default_rng(seed)
        d1 = _random_diagram(rng, int(rng.integers(0, 6)))
        d2 = _random_diagram(rng, int(rng.integers(0, 6)))
        assert dg.bottleneck_distance(d1, d2) == pytest.approx(dg.bottleneck_distance(d2, d1))
        assert dg.wasserstein_distance(d1, d2, p=3) == pytest.approx(dg.wasserstein_distance(d2, d1, p=3))
        assert dg.bottleneck_distance(d1, d2) >= 0.0
        assert dg.wasserstein_distance(d1, d2) <= dg.bottleneck_distance(d1, d2) + 1e-12

    def test_infinite_points_compared_with_offset(self):
        d1 = Diagram(0, [(0.0, INF)])
        d2 = Diagram(0, [(0.0, INF)])
        # (0, 1000) against its own diagonal projection (500, 500)
        assert dg.bottleneck_distance(d1, d2) == pytest.approx(500.0)

    def test_p_infinity_is_bottleneck(self):
        d1 = Diagram(1, [(0.0, 1.0), (0.2, 0.4)])
        d2 = Diagram(1, [(0.1, 0.9)])
        assert dg.wasserstein_distance(d1, d2, p=INF) == dg.bottleneck_distance(d1, d2)

    def test_bad_p(self):
        with pytest.raises(InputError):
            dg.wasserstein_distance(Diagram(1), Diagram(1), p=0.5)


class TestTransforms:
    def test_landscape_single_tent(self):
        d = Diagram(1, [(0.0, 2.0)])
        assert dg.persistence_landscape(d, [0.0, 0.5, 1.0, 1.5, 2.0]) == [0.0, 0.5, 1.0, 0.5, 0.0]
        assert dg.persistence_landscape(d, [1.0], level=2) == [0.0]

    def test_landscape_levels(self):
        d = Diagram(1, [(0.0, 2.0), (1.0, 3.0), (0.0, INF)])
        assert dg.persistence_landscape(d, [1.0, 1.5], level=1) == [1.0, 0.5]
        assert dg.persistence_landscape(d, [1.0, 1.5], level=2) == [0.0, 0.5]

    def test_landscape_bad_level(self):
        with pytest.raises(InputError):
            dg.persistence_landscape(Diagram(1), [0.0], level=0)

    def test_project_infinite(self):
        d = Diagram(0, [(0.0, INF), (0.0, 1.0)])
        assert dg.project_infinite(d, 10.0).pairs == ((0.0, 10.0), (0.0, 1.0))
        assert dg.project_infinite(d).pairs == ((0.0, 1.5), (0.0, 1.0))
        assert dg.project_infinite(Diagram(0, [(0.0, INF)])).pairs == ((0.0, 1.5),)

    def test_project_infinite_keeps_birth_before_death(self):
        d = Diagram(1, [(3.0, INF), (0.0, 1.0)])
        assert dg.project_infinite(d).pairs == ((3.0, 3.0), (0.0, 1.0))

    def test_persistence_birth_coordinates(self):
        d = Diagram(1, [(0.0, 1.0), (0.5, 2.0), (0.0, INF)])
        assert sorted(dg.to_persistence_birth_coordinates(d)) == [(1.0, 0.0), (1.5, 0.5)]
