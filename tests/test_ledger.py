"""
Tests for cohort ledgers
"""

import pytest

from regionsim import CohortLedger, InvalidQuantity

from .conftest import BaseTestCase


class TestCohortLedger(BaseTestCase):
    """Test cases for CohortLedger"""

    def test_admit_appends_independent_cohorts(self):
        """Cohorts with equal durations are not merged"""
        ledger = CohortLedger("latent")
        ledger.admit(10, 3)
        ledger.admit(5, 3)
        assert len(ledger) == 2
        assert ledger.current_total() == 15

    def test_admit_zero_is_noop(self):
        """Admitting nobody leaves the ledger untouched"""
        ledger = CohortLedger()
        ledger.admit(0, 4)
        assert len(ledger) == 0
        assert not ledger
        assert ledger.current_total() == 0

    def test_admit_negative_count_raises(self):
        """Negative cohort sizes are rejected"""
        ledger = CohortLedger()
        with pytest.raises(InvalidQuantity):
            ledger.admit(-1, 3)
        assert ledger.current_total() == 0

    def test_admit_negative_duration_raises(self):
        """Negative durations are rejected"""
        ledger = CohortLedger()
        with pytest.raises(InvalidQuantity):
            ledger.admit(3, -2)

    def test_tick_matures_after_duration(self):
        """A cohort of duration d matures on the d-th tick"""
        ledger = CohortLedger()
        ledger.admit(7, 3)
        assert ledger.tick() == 0
        assert ledger.tick() == 0
        assert ledger.tick() == 7
        assert ledger.current_total() == 0
        assert len(ledger) == 0

    def test_tick_partitions_pending_and_matured(self):
        """Only cohorts reaching zero are released"""
        ledger = CohortLedger()
        ledger.admit(4, 1)
        ledger.admit(6, 2)
        assert ledger.tick() == 4
        assert ledger.current_total() == 6
        assert [c.remaining for c in ledger] == [1]
        assert ledger.tick() == 6

    def test_zero_duration_cohort_matures_on_next_tick(self):
        ledger = CohortLedger()
        ledger.admit(3, 0)
        assert ledger.current_total() == 3
        assert ledger.tick() == 3

    def test_matured_cohorts_are_not_readmitted(self):
        """Ticking an empty ledger releases nothing"""
        ledger = CohortLedger()
        ledger.admit(2, 1)
        ledger.tick()
        assert ledger.tick() == 0

    def test_take_fraction_floors_per_cohort(self):
        """Fractions are floored cohort by cohort and remaining times are kept"""
        ledger = CohortLedger()
        ledger.admit(9, 5)
        ledger.admit(5, 2)
        taken = ledger.take_fraction(0.5)
        assert taken == 4 + 2
        assert [(c.count, c.remaining) for c in ledger] == [(5, 5), (3, 2)]

    def test_take_fraction_drops_emptied_cohorts(self):
        ledger = CohortLedger()
        ledger.admit(4, 3)
        assert ledger.take_fraction(1.0) == 4
        assert len(ledger) == 0

    def test_take_fraction_invalid_rate(self):
        ledger = CohortLedger()
        with pytest.raises(InvalidQuantity):
            ledger.take_fraction(1.5)

    def test_withdraw_oldest_first(self):
        """Withdrawals empty the oldest cohorts first"""
        ledger = CohortLedger()
        ledger.admit(3, 5)
        ledger.admit(4, 6)
        assert ledger.withdraw(5) == 5
        assert [(c.count, c.remaining) for c in ledger] == [(2, 6)]

    def test_withdraw_more_than_available(self):
        ledger = CohortLedger()
        ledger.admit(3, 5)
        assert ledger.withdraw(10) == 3
        assert ledger.current_total() == 0

    def test_clear(self):
        ledger = CohortLedger()
        ledger.admit(3, 5)
        ledger.clear()
        assert ledger.current_total() == 0

    def test_repr_lists_cohorts(self):
        ledger = CohortLedger("immune")
        ledger.admit(3, 5)
        assert repr(ledger) == "CohortLedger('immune', [3@5])"
