"""
Scenario configuration

A scenario is a JSON document declaring the families, viruses, vaccines and
regions of a simulation, the travel edges between regions and the initial
interventions. ``ScenarioConfig`` loads, validates, edits and saves such
documents, and builds a ready-to-run ``Simulator`` from them.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional, Union

from .pathogen import Family, MutatingVirus, Virus
from .region import Region
from .schema_validator import ScenarioSchemaValidator
from .simulator import Simulator
from .vaccine import ATTENUATING, Confinement, Vaccine

logger = logging.getLogger(__name__)

VIRUS_FIELDS = (
    "disease_probability",
    "incubation_time",
    "latency_time",
    "disease_duration",
    "infection_duration",
    "immunity_duration",
    "mortality_rate",
    "contagion_rate",
)

ATTENUATION_FIELDS = (
    "mortality_rate_reduction",
    "disease_duration_reduction",
    "disease_probability_reduction",
    "contagion_rate_reduction",
)


class ScenarioConfig:
    """
    Editable scenario document.

    Parameters are addressed by dotted paths. Entries of the list sections
    (``families``, ``viruses``, ``vaccines``, ``regions``) are addressed by
    name, e.g. ``viruses.Flu.contagion_rate`` or
    ``regions.North.population``; other lists take integer indices.
    """

    def __init__(self, config: Dict[str, Any]):
        if not isinstance(config, dict):
            raise ValueError(f"Invalid config: expected a dictionary, got {type(config).__name__}")
        self.config = copy.deepcopy(config)
        self._original = copy.deepcopy(config)

    @classmethod
    def from_json(cls, path: str) -> "ScenarioConfig":
        """Load a scenario from a JSON file."""
        if not os.path.exists(path):
            raise FileNotFoundError(f"Scenario file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls(json.load(f))

    def to_json(self, path: str) -> str:
        """Save the scenario to a JSON file and return its path."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=2, ensure_ascii=False)
        return path

    def validate(self, verbose: bool = True) -> bool:
        """
        Validate the scenario against the JSON schema.

        Raises:
            ValueError: If validation fails
        """
        return ScenarioSchemaValidator().validate_config(self.config, verbose)

    def reset(self) -> None:
        """Discard every edit made since construction."""
        self.config = copy.deepcopy(self._original)

    # ------------------------------------------------------------------
    # Dotted-path access
    # ------------------------------------------------------------------

    @staticmethod
    def _child(node: Any, key: str, path: str) -> Any:
        if isinstance(node, dict):
            if key not in node:
                raise KeyError(f"Parameter path not found: {path}")
            return node[key]
        if isinstance(node, list):
            for entry in node:
                if isinstance(entry, dict) and entry.get("name") == key:
                    return entry
            try:
                return node[int(key)]
            except (ValueError, IndexError):
                raise KeyError(f"Parameter path not found: {path}") from None
        raise KeyError(f"Parameter path not found: {path}")

    def get_param(self, path: str) -> Any:
        node = self.config
        for key in path.split("."):
            node = self._child(node, key, path)
        return node

    def update_param(self, path: str, value: Any) -> None:
        """
        Update a parameter addressed by a dotted path.

        New keys may be added to existing objects. An existing scalar cannot
        be replaced by a list, nor a list by a scalar.

        Raises:
            KeyError: If the parent path does not exist
            ValueError: If the new value changes the parameter's shape
        """
        *parents, leaf = path.split(".")
        node = self.config
        for key in parents:
            node = self._child(node, key, path)

        if isinstance(node, list):
            target = self._child(node, leaf, path)
            index = node.index(target)
        elif isinstance(node, dict):
            index = leaf
            target = node.get(leaf)
        else:
            raise KeyError(f"Parameter path not found: {path}")

        if target is not None:
            if isinstance(value, (list, dict)) and not isinstance(target, (list, dict)):
                raise ValueError(f"Expected a scalar for '{path}', got {type(value).__name__}")
            if isinstance(target, (list, dict)) and not isinstance(value, (list, dict)):
                raise ValueError(f"Expected a {type(target).__name__} for '{path}'")
        node[index] = value

    def inject(self, updates: Dict[str, Any]) -> None:
        """Apply several dotted-path updates at once."""
        for path, value in updates.items():
            self.update_param(path, value)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def names(self, section: str) -> List[str]:
        return [entry["name"] for entry in self.config.get(section, [])]

    @property
    def steps(self) -> int:
        return int(self.config.get("simulation", {}).get("steps", 0))

    @property
    def seed(self) -> Optional[int]:
        return self.config.get("simulation", {}).get("seed")

    @property
    def log_level(self) -> str:
        return self.config.get("simulation", {}).get("log_level", "INFO")

    # ------------------------------------------------------------------
    # Simulator construction
    # ------------------------------------------------------------------

    def build_simulator(self, seed: Optional[int] = None, validate: bool = True) -> Simulator:
        """
        Build a simulator populated with the scenario's entities.

        Args:
            seed: Overrides the scenario's random seed
            validate: Validate the scenario first

        Returns:
            Simulator ready to be stepped
        """
        if validate:
            self.validate(verbose=False)

        sim = Simulator(seed=self.seed if seed is None else seed)
        cfg = self.config

        for entry in cfg["families"]:
            sim.add_family(Family(entry["name"], entry.get("max_variation", 0.0)))

        for entry in cfg["viruses"]:
            sim.add_virus(self._build_virus(entry, sim.families[entry["family"]]))

        for entry in cfg.get("vaccines", []):
            sim.add_vaccine(self._build_vaccine(entry, sim.viruses[entry["target"]]))

        for entry in cfg["regions"]:
            sim.add_region(Region(entry["name"], entry["population"], entry["internal_mobility"]))

        for edge in cfg.get("mobility", []):
            sim.connect(edge["from"], edge["to"], edge["percentage"])

        initial = cfg.get("initial_state", {})
        for entry in initial.get("infections", []):
            sim.seed_infection(entry["region"], entry["virus"], entry["percentage"])
        for entry in initial.get("vaccinations", []):
            sim.apply_vaccination(entry["region"], entry["vaccine"], entry["percentage"])
        for entry in initial.get("lockdowns", []):
            sim.apply_lockdown(
                entry["region"], Confinement(entry["duration"], entry["mobility_reduction"])
            )
        for entry in initial.get("closures", []):
            sim.apply_closure(entry["region"], entry["targets"])

        logger.info(
            "Built simulator with %d regions, %d viruses and %d vaccines",
            len(sim.regions),
            len(sim.viruses),
            len(sim.vaccines),
        )
        return sim

    @staticmethod
    def _build_virus(entry: Dict[str, Any], family: Family) -> Virus:
        params = {name: entry[name] for name in VIRUS_FIELDS}
        if entry.get("mutating", False):
            return MutatingVirus(
                entry["name"],
                family,
                copy_error_probability=entry.get("copy_error_probability", 0.0),
                recombination_probability=entry.get("recombination_probability", 0.0),
                **params,
            )
        return Virus(entry["name"], family, **params)

    @staticmethod
    def _build_vaccine(entry: Dict[str, Any], target: Virus) -> Vaccine:
        if entry["kind"] == ATTENUATING:
            return Vaccine.attenuating(
                entry["name"],
                target,
                entry["activation_time"],
                entry["duration"],
                **{name: entry.get(name, 0.0) for name in ATTENUATION_FIELDS},
            )
        return Vaccine.inhibiting(
            entry["name"],
            target,
            entry["effectiveness"],
            entry["activation_time"],
            entry["duration"],
        )


def load_scenario(source: Union[str, Dict[str, Any]]) -> ScenarioConfig:
    """Build a ScenarioConfig from a JSON path or a dictionary."""
    if isinstance(source, dict):
        return ScenarioConfig(source)
    if isinstance(source, str):
        return ScenarioConfig.from_json(source)
    raise ValueError(f"Invalid config: expected a path or a dictionary, got {type(source).__name__}")
