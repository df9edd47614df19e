"""
Region graph and simulation clock

The Simulator holds every registered entity, the set of active
(region, variant) pairs and the global step counter. One call to ``step``
advances every region by one time unit; variants spawned during the step are
registered as active only once the step is over.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from .closures import apply_closure, relax_closure
from .exceptions import (
    UnknownRegion,
    UnknownVaccine,
    UnknownVariant,
    check_percentage,
)
from .pathogen import Family, Virus
from .region import Region
from .statistics import CumulativeState, RegionState
from .vaccine import Confinement, Vaccine

logger = logging.getLogger(__name__)

RegionRef = Union[str, Region]
VirusRef = Union[str, Virus]
VaccineRef = Union[str, Vaccine]


class Simulator:
    """
    Multi-region, multi-variant epidemic simulator.

    Args:
        seed: Seed of the random generator used for mutations
        rng: Pre-built generator; takes precedence over ``seed``
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.families: Dict[str, Family] = OrderedDict()
        self.viruses: Dict[str, Virus] = OrderedDict()
        self.vaccines: Dict[str, Vaccine] = OrderedDict()
        self.regions: Dict[str, Region] = OrderedDict()
        self._region_variants: Dict[str, List[Virus]] = OrderedDict()
        self.step_count = 0

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @staticmethod
    def _add(registry: dict, name: str, item, what: str):
        if name in registry:
            raise ValueError(f"{what} '{name}' is already registered")
        registry[name] = item
        return item

    def add_family(self, family: Family) -> Family:
        return self._add(self.families, family.name, family, "Family")

    def add_virus(self, virus: Virus) -> Virus:
        if virus.family.name not in self.families:
            self.add_family(virus.family)
        return self._add(self.viruses, virus.name, virus, "Virus")

    def add_vaccine(self, vaccine: Vaccine) -> Vaccine:
        self.resolve_virus(vaccine.target)
        return self._add(self.vaccines, vaccine.name, vaccine, "Vaccine")

    def add_region(self, region: Region) -> Region:
        self._add(self.regions, region.name, region, "Region")
        self._region_variants[region.name] = list(region.variants)
        return region

    def connect(self, region_a: RegionRef, region_b: RegionRef, percentage: float) -> None:
        """Add a directional travel edge from ``region_a`` to ``region_b``."""
        self.resolve_region(region_a).add_neighbor(self.resolve_region(region_b), percentage)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve_region(self, region: RegionRef) -> Region:
        name = region.name if isinstance(region, Region) else region
        try:
            found = self.regions[name]
        except KeyError:
            raise UnknownRegion(f"Region '{name}' is not registered") from None
        if isinstance(region, Region) and found is not region:
            raise UnknownRegion(f"Region '{name}' is registered as a different object")
        return found

    def resolve_vaccine(self, vaccine: VaccineRef) -> Vaccine:
        name = vaccine.name if isinstance(vaccine, Vaccine) else vaccine
        try:
            return self.vaccines[name]
        except KeyError:
            raise UnknownVaccine(f"Vaccine '{name}' is not registered") from None

    def resolve_virus(self, virus: VirusRef, region: Optional[RegionRef] = None) -> Virus:
        """
        Find a variant by name or object.

        Spawned variants are looked up among the variants of ``region`` (or
        of every region when no region is given).
        """
        name = virus.name if isinstance(virus, Virus) else virus
        if name in self.viruses:
            return self.viruses[name]
        names = [self.resolve_region(region).name] if region is not None else list(self.regions)
        for region_name in names:
            for known in self._region_variants.get(region_name, []):
                if known.name == name:
                    return known
        raise UnknownVariant(f"Variant '{name}' is not registered")

    def region_variants(self, region: RegionRef) -> List[Virus]:
        return list(self._region_variants[self.resolve_region(region).name])

    def active_pairs(self) -> List[Tuple[str, str]]:
        return [
            (region_name, virus.name)
            for region_name, viruses in self._region_variants.items()
            for virus in viruses
        ]

    def _activate(self, region: Region, virus: Virus) -> bool:
        variants = self._region_variants.setdefault(region.name, [])
        if virus in variants:
            return False
        variants.append(virus)
        return True

    # ------------------------------------------------------------------
    # Initial state and stepping
    # ------------------------------------------------------------------

    def seed_infection(self, region: RegionRef, virus: VirusRef, percentage: float) -> int:
        """Seed a variant in a region at the start of the simulation."""
        target = self.resolve_region(region)
        variant = self.resolve_virus(virus)
        check_percentage(percentage, "seed percentage")
        count = target.seed_infection(variant, percentage)
        self._activate(target, variant)
        logger.info("Seeded %s in %s with %d cases", variant.name, target.name, count)
        return count

    def step(self) -> Dict[str, List[Virus]]:
        """
        Advance the simulation by one time unit across all regions.

        Returns:
            Newly spawned variants per region name
        """
        spawned: Dict[str, List[Virus]] = OrderedDict()
        for region in self.regions.values():
            region.prepare_exchange()
        for region in self.regions.values():
            spawned[region.name] = region.step(self.rng)

        # registered after every region has finished the step
        for region_name, variants in spawned.items():
            for virus in variants:
                self._activate(self.regions[region_name], virus)

        self.step_count += 1
        total = sum(len(v) for v in spawned.values())
        logger.info("Step %d completed (%d new variants)", self.step_count, total)
        return {name: variants for name, variants in spawned.items() if variants}

    def run(self, steps: int) -> Dict[str, List[Virus]]:
        """
        Run several steps; the first failure aborts the remaining ones.

        Returns:
            Every variant spawned during the run, per region name
        """
        if steps < 0:
            raise ValueError(f"Number of steps cannot be negative, got {steps}")
        spawned: Dict[str, List[Virus]] = OrderedDict()
        for _ in range(steps):
            for region_name, variants in self.step().items():
                spawned.setdefault(region_name, []).extend(variants)
        return spawned

    # ------------------------------------------------------------------
    # Interventions
    # ------------------------------------------------------------------

    def apply_vaccination(self, region: RegionRef, vaccine: VaccineRef, percentage: float):
        target = self.resolve_region(region)
        registered = self.resolve_vaccine(vaccine)
        check_percentage(percentage, "vaccination percentage")
        return target.vaccinate(registered, percentage)

    def apply_lockdown(self, region: RegionRef, confinement: Confinement) -> None:
        self.resolve_region(region).apply_lockdown(confinement)

    def release_lockdown(self, region: RegionRef) -> None:
        self.resolve_region(region).release_lockdown()

    def close_flow(self, region_a: RegionRef, region_b: RegionRef) -> int:
        """Stop the flow ``region_a`` receives from ``region_b``."""
        return self._flow(region_a, [region_b], close=True)

    def open_flow(self, region_a: RegionRef, region_b: RegionRef) -> int:
        return self._flow(region_a, [region_b], close=False)

    def apply_closure(self, region: RegionRef, targets: Iterable[RegionRef]) -> int:
        return self._flow(region, targets, close=True)

    def relax_closure(self, region: RegionRef, targets: Iterable[RegionRef]) -> int:
        return self._flow(region, targets, close=False)

    def _flow(self, region: RegionRef, targets: Iterable[RegionRef], close: bool) -> int:
        origin = self.resolve_region(region)
        resolved = [self.resolve_region(target) for target in targets]
        strangers = [t.name for t in resolved if not origin.is_neighbor(t)]
        if strangers:
            logger.warning("%s is not a neighbour of %s", ", ".join(strangers), origin.name)
        if close:
            return apply_closure(origin, resolved)
        return relax_closure(origin, resolved)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_state(self, region: RegionRef, virus: VirusRef) -> RegionState:
        target = self.resolve_region(region)
        return target.current_state(self.resolve_virus(virus, target))

    def cumulative_state(self, region: RegionRef, virus: VirusRef) -> CumulativeState:
        target = self.resolve_region(region)
        return target.cumulative_state(self.resolve_virus(virus, target))

    def observables(self):
        """State history of every (region, variant) pair as an xarray DataArray."""
        from .regionsim_utils import compute_observables

        return compute_observables(self)

    def save_history(self, path: str) -> str:
        """Write the observables to a netCDF file."""
        from .regionsim_utils import save_observables

        return save_observables(self.observables(), path)
