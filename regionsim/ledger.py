"""
Cohort ledgers

A ledger is the ordered collection of cohorts for one compartment of one
variant in one region. A cohort is a group of people who entered the
compartment together and leave it together once their remaining time runs
out. Cohorts are never merged.
"""

from dataclasses import dataclass
from typing import Iterator, List

from .exceptions import InvalidQuantity, check_count


@dataclass
class Cohort:
    """Homogeneous group of individuals sharing a remaining time."""

    count: int
    remaining: int


class CohortLedger:
    """
    Ordered sequence of independent cohorts for a single compartment.

    The ledger never re-admits the cohorts it releases: ``tick`` hands the
    matured total back to the caller, which moves it to the next
    compartment.
    """

    def __init__(self, name: str = "ledger"):
        self.name = name
        self._cohorts: List[Cohort] = []

    def admit(self, count: int, duration: int) -> None:
        """
        Append a cohort.

        Args:
            count: Number of individuals entering the compartment
            duration: Time units before the cohort matures

        Raises:
            InvalidQuantity: If count or duration is negative
        """
        count = check_count(count, f"{self.name} cohort size")
        if duration < 0:
            raise InvalidQuantity(
                f"{self.name} cohort duration cannot be negative, got {duration}"
            )
        if count == 0:
            return
        self._cohorts.append(Cohort(count, int(duration)))

    def tick(self) -> int:
        """
        Advance every cohort by one time unit.

        Cohorts whose remaining time reaches zero are removed.

        Returns:
            Total number of individuals in the matured cohorts
        """
        matured = 0
        pending = []
        for cohort in self._cohorts:
            cohort.remaining = max(cohort.remaining - 1, 0)
            if cohort.remaining == 0:
                matured += cohort.count
            else:
                pending.append(cohort)
        self._cohorts = pending
        return matured

    def take_fraction(self, rate: float) -> int:
        """
        Remove ``floor(rate * count)`` individuals from every cohort in place.

        Cohorts keep their remaining time; emptied cohorts are dropped.

        Returns:
            Total number of individuals removed
        """
        if not 0.0 <= rate <= 1.0:
            raise InvalidQuantity(f"rate must be within [0, 1], got {rate}")
        taken = 0
        for cohort in self._cohorts:
            portion = int(rate * cohort.count)
            cohort.count -= portion
            taken += portion
        self._drop_empty()
        return taken

    def withdraw(self, count: int) -> int:
        """
        Remove up to ``count`` individuals, oldest cohorts first.

        Returns:
            Number of individuals actually removed
        """
        remaining = check_count(count, f"{self.name} withdrawal")
        withdrawn = 0
        for cohort in self._cohorts:
            if remaining == 0:
                break
            portion = min(cohort.count, remaining)
            cohort.count -= portion
            remaining -= portion
            withdrawn += portion
        self._drop_empty()
        return withdrawn

    def current_total(self) -> int:
        return sum(cohort.count for cohort in self._cohorts)

    def clear(self) -> None:
        self._cohorts = []

    def _drop_empty(self):
        self._cohorts = [cohort for cohort in self._cohorts if cohort.count > 0]

    def __iter__(self) -> Iterator[Cohort]:
        return iter(list(self._cohorts))

    def __len__(self) -> int:
        return len(self._cohorts)

    def __bool__(self) -> bool:
        return bool(self._cohorts)

    def __repr__(self) -> str:
        cohorts = ", ".join(f"{c.count}@{c.remaining}" for c in self._cohorts)
        return f"CohortLedger({self.name!r}, [{cohorts}])"
