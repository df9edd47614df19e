"""
Tests for the region graph: neighbours, closures and population exchange
"""

import pytest

from regionsim import EmptyClosureTarget, InvalidPercentage, UnknownRegion
from regionsim.closures import apply_closure, relax_closure

from .conftest import BaseTestCase


class TestNeighbours(BaseTestCase):
    """Test cases for neighbour edges"""

    def test_add_neighbor(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 1000, 1)
        a.add_neighbor(b, 10)
        assert a.is_neighbor(b)
        assert not b.is_neighbor(a)
        assert a.travel_percentage(b) == 10
        assert not a.is_closed(b)

    def test_self_neighbor_rejected(self):
        a = self.helpers.create_region("A", 1000, 1)
        with pytest.raises(ValueError):
            a.add_neighbor(a, 10)

    def test_invalid_percentage(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 1000, 1)
        with pytest.raises(InvalidPercentage):
            a.add_neighbor(b, 120)

    def test_unknown_neighbor(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 1000, 1)
        with pytest.raises(UnknownRegion):
            a.travel_percentage(b)
        with pytest.raises(UnknownRegion):
            a.set_closure(b, True)

    def test_external_population(self):
        """Inflow is the neighbour's outbound percentage of its population"""
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 2000, 1)
        a.add_neighbor(b, 5)
        b.add_neighbor(a, 10)
        assert a.external_population() == 200
        assert b.external_population() == 50


class TestClosures(BaseTestCase):
    """Test cases for closure propagation"""

    def test_close_then_open_keeps_percentage(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 2000, 1)
        a.add_neighbor(b, 5)
        b.add_neighbor(a, 10)

        a.close_flow([b])
        assert a.is_closed(b)
        assert a.external_population() == 0
        assert a.travel_percentage(b) == 5

        a.open_flow([b])
        assert not a.is_closed(b)
        assert a.travel_percentage(b) == 5
        assert a.external_population() == 200

    def test_closure_is_directional(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 2000, 1)
        a.add_neighbor(b, 5)
        b.add_neighbor(a, 10)
        apply_closure(a, [b])
        assert a.is_closed(b)
        assert not b.is_closed(a)
        assert b.external_population() == 50

    def test_propagation_through_targets(self, triangle):
        """Reached targets close against the other targets they border"""
        a, b, c = triangle
        flagged = apply_closure(a, [b, c])
        assert a.is_closed(b) and a.is_closed(c)
        assert b.is_closed(c) and c.is_closed(b)
        assert not b.is_closed(a)
        assert not c.is_closed(a)
        assert flagged == 4

    def test_cycles_terminate(self, triangle):
        """A fully connected graph is walked once per region"""
        a, b, c = triangle
        flagged = apply_closure(a, [a, b, c])
        assert flagged == 6
        assert all(x.is_closed(y) for x in triangle for y in triangle if x is not y)

    def test_relax_mirrors_apply(self, triangle):
        a, b, c = triangle
        apply_closure(a, [b, c])
        relax_closure(a, [b, c])
        assert not any(x.is_closed(y) for x in triangle for y in triangle if x is not y)

    def test_non_neighbour_targets_are_skipped(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 1000, 1)
        assert apply_closure(a, [b]) == 0

    def test_empty_targets(self):
        a = self.helpers.create_region("A", 1000, 1)
        with pytest.raises(EmptyClosureTarget):
            apply_closure(a, [])
        with pytest.raises(EmptyClosureTarget):
            relax_closure(a, [])

    def test_duplicate_targets(self):
        a = self.helpers.create_region("A", 1000, 1)
        b = self.helpers.create_region("B", 1000, 1)
        a.add_neighbor(b, 1)
        assert apply_closure(a, [b, b]) == 1
