"""
Region engine

A Region owns the cohort ledgers of every variant present in it and runs
the per-step transition pipeline:

    1. external exchange: commuters arrive on even steps, the same number leave
       on odd steps
    2. latent -> infectious maturation
    3. new infections (and mutations), infectious recovery
    4. latent -> symptomatic transition
    5. mortality and symptomatic recovery
    6. immunity waning
    7. vaccination programme advancement
    8. lockdown expiry
    9. state snapshot

Each stage runs for every variant before the next stage starts. Variants
spawned by mutation during a step get their ledgers immediately but are only
processed from the following step on.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .arena import VariantArena
from .closures import apply_closure, relax_closure
from .exceptions import (
    InvalidQuantity,
    UnknownRegion,
    UnknownVariant,
    check_count,
    check_percentage,
)
from .mutation import mutate_by_copy_error, mutate_by_recombination
from .pathogen import Family, Virus
from .statistics import (
    CumulativeState,
    RegionState,
    RegionStatistics,
    VaccinationRecord,
)
from .vaccine import Confinement, Vaccine

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def _ratio(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator, 2)


@dataclass
class Lockdown:
    """Active lockdown: mobility used by transmission and steps left."""

    mobility: float
    remaining: int


class Region:
    """
    A geographic region of the simulated network.

    Args:
        name: Region name
        population: Number of inhabitants at the start of the simulation
        internal_mobility: Number of contact opportunities per person and
            step used by the transmission model
    """

    def __init__(self, name: str, population: int, internal_mobility: float):
        check_count(population, f"population of {name}")
        if internal_mobility < 0:
            raise InvalidQuantity(
                f"Internal mobility of {name} cannot be negative, got {internal_mobility}"
            )
        self.name = name
        self.population = int(population)
        self.internal_mobility = internal_mobility
        self.lockdown: Optional[Lockdown] = None
        self.step_index = 0
        # commuters received on the last even step, sent back on the next odd one
        self._commuters = 0
        self._pending_inflow: Optional[int] = None

        self._neighbors: Dict["Region", float] = {}
        self._closures: Dict["Region", bool] = {}
        self._arena = VariantArena()
        self._stats: Dict[int, RegionStatistics] = {}
        self._history: Dict[int, List[RegionState]] = {}
        self._vaccinations: List[VaccinationRecord] = []
        # handles processed by the step in progress
        self._active: List[int] = []

    def __repr__(self) -> str:
        return f"Region({self.name!r}, population={self.population})"

    # ------------------------------------------------------------------
    # Neighbourhood and closures
    # ------------------------------------------------------------------

    def add_neighbor(self, region: "Region", percentage: float) -> None:
        """
        Add or update a directional travel edge towards ``region``.

        Args:
            region: Neighbouring region
            percentage: Percentage of this region's population travelling
                to the neighbour
        """
        if region is None or region is self:
            raise ValueError(f"A neighbour of {self.name} cannot be None or the region itself")
        check_percentage(percentage, f"travel percentage {self.name} -> {region.name}")
        self._neighbors[region] = percentage
        self._closures.setdefault(region, False)

    @property
    def neighbors(self) -> Dict["Region", float]:
        return dict(self._neighbors)

    def is_neighbor(self, region: "Region") -> bool:
        return region in self._neighbors

    def travel_percentage(self, region: "Region") -> float:
        try:
            return self._neighbors[region]
        except KeyError:
            raise UnknownRegion(f"{region.name} is not a neighbour of {self.name}") from None

    def is_closed(self, region: "Region") -> bool:
        return self._closures.get(region, False)

    def set_closure(self, region: "Region", closed: bool) -> None:
        if region not in self._neighbors:
            raise UnknownRegion(f"{region.name} is not a neighbour of {self.name}")
        self._closures[region] = closed

    def close_flow(self, targets: Iterable["Region"]) -> int:
        return apply_closure(self, targets)

    def open_flow(self, targets: Iterable["Region"]) -> int:
        return relax_closure(self, targets)

    def external_population(self) -> int:
        """Commuters received from every non-closed neighbour."""
        total = 0
        for neighbor in self._neighbors:
            if self._closures[neighbor] or not neighbor.is_neighbor(self):
                continue
            total += int(neighbor.travel_percentage(self) * neighbor.population / 100)
        return total

    def prepare_exchange(self) -> None:
        """
        Fix the inflow of the coming step before any region moves.

        The simulator calls this on every region before stepping any of them,
        so the inflow is computed from the populations at the start of the
        step whatever order the regions are stepped in.
        """
        self._pending_inflow = self.external_population()

    # ------------------------------------------------------------------
    # Lockdown
    # ------------------------------------------------------------------

    @property
    def effective_mobility(self) -> float:
        if self.lockdown is not None and self.lockdown.remaining > 0:
            return self.lockdown.mobility
        return self.internal_mobility

    def apply_lockdown(self, confinement: Confinement) -> None:
        """Reduce mobility for a while and close against every neighbour."""
        self.lockdown = Lockdown(confinement.mobility_reduction, confinement.duration)
        if self._neighbors:
            apply_closure(self, list(self._neighbors))
        logger.info(
            "Lockdown in %s for %d steps (mobility %s)",
            self.name,
            confinement.duration,
            confinement.mobility_reduction,
        )

    def release_lockdown(self) -> None:
        """Clear the lockdown and reopen every neighbour."""
        self.lockdown = None
        if self._neighbors:
            relax_closure(self, list(self._neighbors))
        logger.info("Lockdown released in %s", self.name)

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def _register(self, virus: Virus) -> Tuple[int, bool]:
        handle, created = self._arena.register(virus)
        if created:
            self._stats[handle] = RegionStatistics()
            self._history[handle] = []
        return handle, created

    def register_variant(self, virus: Virus) -> int:
        """Start tracking a variant; returns its handle in this region."""
        return self._register(virus)[0]

    def has_variant(self, virus: Virus) -> bool:
        return virus in self._arena

    def _handle(self, virus: Virus) -> int:
        try:
            return self._arena.handle_of(virus)
        except UnknownVariant:
            raise UnknownVariant(
                f"Variant {virus.name} has never been present in {self.name}"
            ) from None

    @property
    def variants(self) -> List[Virus]:
        """Every tracked variant, original parameters, in arrival order."""
        return [record.original for record in self._arena]

    def variant(self, virus: Virus) -> Virus:
        """Parameter snapshot currently in force for a tracked variant."""
        return self._arena.variant(self._handle(virus))

    def statistics(self, virus: Virus) -> RegionStatistics:
        return self._stats[self._handle(virus)]

    @property
    def vaccinations(self) -> List[VaccinationRecord]:
        return list(self._vaccinations)

    def susceptible(self, virus: Virus) -> int:
        return self._susceptible(self._handle(virus))

    def _susceptible(self, handle: int) -> int:
        family = self._arena.original(handle).family
        protected = self._vaccinated(family, inhibiting_only=True)
        return max(self.population - self._stats[handle].tracked() - protected, 0)

    def _vaccinated(self, family: Family, inhibiting_only: bool = False) -> int:
        return sum(
            record.count_vaccinated
            for record in self._vaccinations
            if record.active
            and record.vaccine.family is family
            and (record.vaccine.is_inhibiting or not inhibiting_only)
        )

    # ------------------------------------------------------------------
    # Infection entry points
    # ------------------------------------------------------------------

    def seed_infection(self, virus: Virus, percentage: float) -> int:
        """
        Seed index cases of a variant.

        ``percentage`` percent of the population (rounded half up, clamped to
        the susceptible pool) enters the infectious compartment directly.

        Returns:
            Number of people seeded
        """
        check_percentage(percentage, f"seed percentage of {virus.name}")
        handle = self.register_variant(virus)
        count = min(_round_half_up(percentage / 100.0 * self.population), self._susceptible(handle))
        stats = self._stats[handle]
        stats.infectious.admit(count, self._arena.variant(handle).infection_duration)
        stats.total_infected += count
        stats.total_infectious += count
        logger.debug("Seeded %d cases of %s in %s", count, virus.name, self.name)
        return count

    def infect(self, virus: Virus, count: int) -> int:
        """
        Infect people directly, admitting them to the latent compartment.

        Over-capacity counts are clamped to the susceptible pool.

        Returns:
            Number of people actually infected

        Raises:
            InvalidQuantity: If count is negative
        """
        count = check_count(count, "infections")
        handle = self.register_variant(virus)
        count = min(count, self._susceptible(handle))
        self._admit_latent(handle, count)
        return count

    def _admit_latent(self, handle: int, count: int) -> None:
        if count <= 0:
            return
        virus = self._arena.variant(handle)
        stats = self._stats[handle]
        stats.latent.admit(count, virus.incubation_time)
        stats.contagion_queue.admit(count, virus.latency_time)
        stats.total_infected += count

    def vaccinate(self, vaccine: Vaccine, percentage: float) -> VaccinationRecord:
        """
        Administer a vaccine to a percentage of the population.

        The dosed count is fixed now; inhibiting vaccines only count the
        effectively protected share. The record activates after the
        vaccine's activation time and expires after its duration.
        """
        check_percentage(percentage, f"vaccination percentage of {vaccine.name}")
        doses = _round_half_up(percentage / 100.0 * self.population)
        record = VaccinationRecord(
            vaccine=vaccine,
            remaining_activation=vaccine.activation_time,
            remaining_duration=vaccine.duration,
            count_vaccinated=vaccine.doses_protected(doses),
        )
        self._vaccinations.append(record)
        logger.info(
            "Vaccine %s administered to %d people in %s (%d protected)",
            vaccine.name,
            doses,
            self.name,
            record.count_vaccinated,
        )
        return record

    # ------------------------------------------------------------------
    # Step pipeline
    # ------------------------------------------------------------------

    def step(self, rng: Optional[np.random.Generator] = None) -> List[Virus]:
        """
        Advance the region by one time unit.

        Args:
            rng: Source of randomness for mutations

        Returns:
            Variants that appeared in the region during this step
        """
        rng = rng if rng is not None else np.random.default_rng()
        self._active = list(self._stats)
        spawned: List[Virus] = []

        self._exchange_population()
        for handle in self._active:
            self._mature_latent(handle)
        spread = {handle: self._spread(handle, rng, spawned) for handle in self._active}
        for handle in self._active:
            self._develop_symptoms(handle)
        deaths = {handle: self._resolve_symptomatic(handle) for handle in self._active}
        for handle in self._active:
            self._stats[handle].immune.tick()
        self._advance_vaccinations()
        self._advance_lockdown()
        for handle in self._active:
            new_infections, infectious = spread[handle]
            self._history[handle].append(
                self._snapshot(handle, new_infections, deaths[handle], infectious)
            )

        logger.debug(
            "%s step %d: population %d, %d variants, %d spawned",
            self.name,
            self.step_index,
            self.population,
            len(self._active),
            len(spawned),
        )
        self.step_index += 1
        self._active = []
        return spawned

    def _exchange_population(self):
        inflow = self._pending_inflow
        self._pending_inflow = None
        if self.step_index % 2 == 0:
            if inflow is None:
                inflow = self.external_population()
            self._commuters = inflow
            self.population += inflow
        else:
            # the commuters leave, but never below the people tracked in compartments
            floor = max((stats.tracked() for stats in self._stats.values()), default=0)
            self.population = max(self.population - self._commuters, floor)
            self._commuters = 0

    def _mature_latent(self, handle: int):
        stats = self._stats[handle]
        virus = self._arena.variant(handle)
        early = stats.latent.withdraw(stats.contagion_queue.tick())
        matured = stats.latent.tick()
        stats.contagion_queue.withdraw(matured)
        moved = early + matured
        if moved:
            stats.infectious.admit(moved, virus.infection_duration)
            stats.total_infectious += moved

    def _spread(self, handle: int, rng: np.random.Generator, spawned: List[Virus]) -> Tuple[int, int]:
        stats = self._stats[handle]
        virus = self._arena.variant(handle)
        infectious = stats.infectious.current_total()

        new_infections = 0
        if infectious > 0 and self.population > 0:
            fraction = min(infectious / self.population, 1.0)
            risk = min(fraction * virus.contagion_rate, 1.0)
            probability = 1.0 - (1.0 - risk) ** self.effective_mobility
            susceptible = self._susceptible(handle)
            new_infections = min(int(susceptible * probability), susceptible)
            if virus.mutating and new_infections > 0:
                new_infections -= self._mutate(handle, fraction, susceptible, new_infections, rng, spawned)
            self._admit_latent(handle, new_infections)

        recovered = stats.infectious.tick()
        if recovered:
            self._immunize(handle, recovered)
            stats.recovered += recovered
        return new_infections, infectious

    def _mutate(
        self,
        handle: int,
        fraction: float,
        susceptible: int,
        budget: int,
        rng: np.random.Generator,
        spawned: List[Virus],
    ) -> int:
        """Spawn copy-error and recombination cohorts; returns people diverted."""
        parent = self._arena.original(handle)
        contagion = self._arena.variant(handle).contagion_rate
        used = 0

        if parent.copy_error_probability > 0:
            size = int(susceptible * fraction * contagion * parent.copy_error_probability)
            size = min(size, budget)
            if size > 0:
                used += self._admit_mutant(mutate_by_copy_error(parent, rng), size, spawned)

        if parent.recombination_probability > 0:
            for other in self._active:
                partner = self._arena.original(other)
                if other == handle or not partner.mutating or not parent.same_family(partner):
                    continue
                if used >= budget:
                    break
                partner_fraction = min(
                    self._stats[other].infectious.current_total() / self.population, 1.0
                )
                size = int(
                    susceptible
                    * fraction
                    * partner_fraction
                    * parent.recombination_probability
                    * contagion
                    * self.effective_mobility
                )
                size = min(size, budget - used)
                if size > 0:
                    child = mutate_by_recombination(parent, partner, rng)
                    used += self._admit_mutant(child, size, spawned)
        return used

    def _admit_mutant(self, mutant: Virus, size: int, spawned: List[Virus]) -> int:
        handle, created = self._register(mutant)
        size = min(size, self._susceptible(handle))
        self._admit_latent(handle, size)
        if created:
            spawned.append(mutant)
            logger.info("Variant %s emerged in %s with %d infections", mutant.name, self.name, size)
        return size

    def _develop_symptoms(self, handle: int):
        stats = self._stats[handle]
        virus = self._arena.variant(handle)
        moved = stats.latent.take_fraction(virus.disease_probability)
        if moved:
            stats.contagion_queue.withdraw(moved)
            stats.symptomatic.admit(moved, virus.disease_duration)
            stats.total_symptomatic += moved

    def _resolve_symptomatic(self, handle: int) -> int:
        stats = self._stats[handle]
        virus = self._arena.variant(handle)
        deaths = stats.symptomatic.take_fraction(virus.mortality_rate)
        if deaths:
            self.population = max(self.population - deaths, 0)
            stats.deaths += deaths
        recovered = stats.symptomatic.tick()
        if recovered:
            self._immunize(handle, recovered)
            stats.recovered += recovered
        return deaths

    def _immunize(self, handle: int, count: int):
        """Admit recovered people to the immune ledger of every family member."""
        family = self._arena.original(handle).family
        members = self._active or [handle]
        for member in members:
            if self._arena.original(member).family is not family:
                continue
            stats = self._stats[member]
            room = max(self.population - stats.tracked(), 0)
            stats.immune.admit(min(count, room), self._arena.variant(member).immunity_duration)

    def _advance_vaccinations(self):
        for record in list(self._vaccinations):
            if not record.active:
                if record.remaining_activation > 0:
                    record.remaining_activation -= 1
                if record.remaining_activation == 0:
                    self._activate(record)
            else:
                record.remaining_duration -= 1
                if record.remaining_duration <= 0:
                    self._expire(record)
                    self._vaccinations.remove(record)

    def _activate(self, record: VaccinationRecord):
        vaccine = record.vaccine
        record.active = True
        for handle in self._arena.family_handles(vaccine.family):
            self._stats[handle].total_vaccinated += record.count_vaccinated
            if vaccine.is_attenuating:
                self._arena.attenuate(handle, vaccine)
                record.attenuated_handles.append(handle)
        logger.info(
            "Vaccine %s active in %s for %d people", vaccine.name, self.name, record.count_vaccinated
        )

    def _expire(self, record: VaccinationRecord):
        for handle in record.attenuated_handles:
            self._arena.restore(handle, record.vaccine)
        logger.info("Vaccine %s expired in %s", record.vaccine.name, self.name)

    def _advance_lockdown(self):
        if self.lockdown is None:
            return
        self.lockdown.remaining -= 1
        if self.lockdown.remaining <= 0:
            self.release_lockdown()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _snapshot(self, handle: int, new_infections: int, deaths: int, infectious: int) -> RegionState:
        stats = self._stats[handle]
        return RegionState(
            step=self.step_index,
            population=self.population,
            susceptible=self._susceptible(handle),
            latent=stats.latent.current_total(),
            infectious=stats.infectious.current_total(),
            symptomatic=stats.symptomatic.current_total(),
            immune=stats.immune.current_total(),
            vaccinated=self._vaccinated(self._arena.original(handle).family),
            new_infections=new_infections,
            deaths=deaths,
            transmission_rate=_ratio(new_infections, infectious),
            mortality_rate=_ratio(stats.deaths, stats.total_infected),
        )

    def current_state(self, virus: Virus) -> RegionState:
        """
        Latest state record of a variant.

        Before the variant's first step a live record is built from the
        current ledgers.

        Raises:
            UnknownVariant: If the variant was never present in the region
        """
        handle = self._handle(virus)
        history = self._history[handle]
        if history:
            return history[-1]
        return self._snapshot(handle, 0, 0, self._stats[handle].infectious.current_total())

    def cumulative_state(self, virus: Virus) -> CumulativeState:
        """Running totals of a variant since it appeared in the region."""
        handle = self._handle(virus)
        stats = self._stats[handle]
        history = self._history[handle]
        return CumulativeState(
            step=self.step_index,
            population=self.population,
            total_infected=stats.total_infected,
            total_infectious=stats.total_infectious,
            total_symptomatic=stats.total_symptomatic,
            total_vaccinated=stats.total_vaccinated,
            deaths=stats.deaths,
            recovered=stats.recovered,
            transmission_rate=history[-1].transmission_rate if history else 0.0,
            mortality_rate=_ratio(stats.deaths, stats.total_infected),
        )

    def history(self, virus: Virus) -> List[RegionState]:
        return list(self._history[self._handle(virus)])

    def history_frame(self, virus: Virus) -> pd.DataFrame:
        """State history of a variant as a DataFrame indexed by step."""
        records = [state.as_dict() for state in self.history(virus)]
        columns = list(RegionState.__dataclass_fields__)
        return pd.DataFrame.from_records(records, columns=columns).set_index("step")
