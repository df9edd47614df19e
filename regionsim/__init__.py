"""
RegionSim Python

A multi-region, multi-variant epidemic simulator.
Provides pathogen and vaccine models, the per-region compartment engine,
a simulation clock over the region graph, and scenario configuration
management with JSON schema validation.
"""

from .config import ScenarioConfig, load_scenario
from .exceptions import (
    EmptyClosureTarget,
    FamilyMismatch,
    InvalidPercentage,
    InvalidQuantity,
    SimulationError,
    UnknownRegion,
    UnknownVaccine,
    UnknownVariant,
)
from .ledger import Cohort, CohortLedger
from .mutation import mutate_by_copy_error, mutate_by_recombination
from .pathogen import Family, MutatingVirus, Virus
from .region import Region
from .regionsim_utils import compute_observables, history_dataframe
from .schema_validator import (
    ScenarioSchemaValidator,
    SchemaValidator,
    validate_scenario_config,
    validate_scenario_config_safe,
)
from .simulator import Simulator
from .statistics import CumulativeState, RegionState
from .vaccine import Confinement, Vaccine

__version__ = "0.1.0"
__author__ = "RegionSim Development Team"

__all__ = [
    "Cohort",
    "CohortLedger",
    "Confinement",
    "CumulativeState",
    "EmptyClosureTarget",
    "Family",
    "FamilyMismatch",
    "InvalidPercentage",
    "InvalidQuantity",
    "MutatingVirus",
    "Region",
    "RegionState",
    "ScenarioConfig",
    "ScenarioSchemaValidator",
    "SchemaValidator",
    "SimulationError",
    "Simulator",
    "UnknownRegion",
    "UnknownVaccine",
    "UnknownVariant",
    "Vaccine",
    "Virus",
    "compute_observables",
    "history_dataframe",
    "load_scenario",
    "mutate_by_copy_error",
    "mutate_by_recombination",
    "validate_scenario_config",
    "validate_scenario_config_safe",
]
