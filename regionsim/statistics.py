"""
Per-region, per-variant bookkeeping records.
"""

from dataclasses import asdict, dataclass, field
from typing import List

from .ledger import CohortLedger
from .vaccine import Vaccine


@dataclass
class RegionStatistics:
    """
    Compartment ledgers and running counters of one variant in one region.

    The ``contagion_queue`` ledger runs in parallel with ``latent``: it holds
    latency countdowns for the same people and is not a compartment of its
    own. Counters only ever increase.
    """

    latent: CohortLedger = field(default_factory=lambda: CohortLedger("latent"))
    infectious: CohortLedger = field(default_factory=lambda: CohortLedger("infectious"))
    symptomatic: CohortLedger = field(default_factory=lambda: CohortLedger("symptomatic"))
    immune: CohortLedger = field(default_factory=lambda: CohortLedger("immune"))
    contagion_queue: CohortLedger = field(
        default_factory=lambda: CohortLedger("contagion_queue")
    )

    total_infected: int = 0
    total_infectious: int = 0
    total_symptomatic: int = 0
    total_vaccinated: int = 0
    deaths: int = 0
    recovered: int = 0

    def tracked(self) -> int:
        """People currently held in any compartment."""
        return (
            self.latent.current_total()
            + self.infectious.current_total()
            + self.symptomatic.current_total()
            + self.immune.current_total()
        )


@dataclass
class VaccinationRecord:
    """One administration of a vaccine in a region."""

    vaccine: Vaccine
    remaining_activation: int
    remaining_duration: int
    count_vaccinated: int
    active: bool = False
    # variant handles this record attenuated when it activated
    attenuated_handles: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class RegionState:
    """Snapshot of one variant in one region at the end of a step."""

    step: int
    population: int
    susceptible: int
    latent: int
    infectious: int
    symptomatic: int
    immune: int
    vaccinated: int
    new_infections: int
    deaths: int
    transmission_rate: float
    mortality_rate: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CumulativeState:
    """Totals of one variant in one region since the simulation started."""

    step: int
    population: int
    total_infected: int
    total_infectious: int
    total_symptomatic: int
    total_vaccinated: int
    deaths: int
    recovered: int
    transmission_rate: float
    mortality_rate: float

    def as_dict(self) -> dict:
        return asdict(self)


# Numeric fields exported as observables, in order
STATE_FIELDS = (
    "population",
    "susceptible",
    "latent",
    "infectious",
    "symptomatic",
    "immune",
    "vaccinated",
    "new_infections",
    "deaths",
    "transmission_rate",
    "mortality_rate",
)
