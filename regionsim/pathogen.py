"""
Pathogen model

Immutable descriptions of pathogen variants and the families that group
them. A variant is identified by its name and its family; two variants of
the same family cross-immunize each other and share the mutation magnitude
bound of the family.
"""

from dataclasses import dataclass, field, replace
from typing import Tuple

from .exceptions import InvalidQuantity, check_percentage

# Parameters expressed as probabilities in [0, 1]
RATE_PARAMS = ("disease_probability", "mortality_rate", "contagion_rate")

# Parameters expressed in simulation time units
DURATION_PARAMS = (
    "incubation_time",
    "latency_time",
    "disease_duration",
    "infection_duration",
    "immunity_duration",
)

# Extra probabilities carried only by mutating variants
MUTATION_PARAMS = ("copy_error_probability", "recombination_probability")


@dataclass(frozen=True, eq=False)
class Family:
    """
    Group of related variants.

    Families compare by identity: two Family objects with the same name are
    still different families.

    Args:
        name: Family name
        max_variation: Maximum variation percentage applied by copy-error
            mutations of member variants
    """

    name: str
    max_variation: float = 0.0

    def __post_init__(self):
        check_percentage(self.max_variation, "max_variation")

    def __repr__(self) -> str:
        return f"Family({self.name!r}, max_variation={self.max_variation})"


@dataclass(frozen=True)
class Virus:
    """
    A non-mutating pathogen variant.

    Only ``name`` and ``family`` take part in equality and hashing, so a
    variant and a re-parameterised clone of it (for example after a vaccine
    attenuates it) are the same variant for bookkeeping purposes.
    """

    name: str
    family: Family
    disease_probability: float = field(default=0.0, compare=False)
    incubation_time: int = field(default=0, compare=False)
    latency_time: int = field(default=0, compare=False)
    disease_duration: int = field(default=0, compare=False)
    infection_duration: int = field(default=0, compare=False)
    immunity_duration: int = field(default=0, compare=False)
    mortality_rate: float = field(default=0.0, compare=False)
    contagion_rate: float = field(default=0.0, compare=False)
    attenuated_by: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self):
        for name in self.rate_params():
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidQuantity(
                    f"{name} of {self.name} must be within [0, 1], got {value}"
                )
        for name in DURATION_PARAMS:
            if getattr(self, name) < 0:
                raise InvalidQuantity(
                    f"{name} of {self.name} cannot be negative, got {getattr(self, name)}"
                )

    @property
    def mutating(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        return "mutating" if self.mutating else "non-mutating"

    @property
    def attenuated(self) -> bool:
        return bool(self.attenuated_by)

    @classmethod
    def rate_params(cls) -> Tuple[str, ...]:
        return RATE_PARAMS

    @classmethod
    def numeric_params(cls) -> Tuple[str, ...]:
        """Names of every numeric parameter, rates first."""
        return cls.rate_params() + DURATION_PARAMS

    def same_family(self, other: "Virus") -> bool:
        return self.family is other.family

    def parameters(self) -> dict:
        """Numeric parameters as a plain dictionary."""
        return {name: getattr(self, name) for name in self.numeric_params()}

    def evolve(self, **changes) -> "Virus":
        """Return a copy of this variant with some fields replaced."""
        return replace(self, **changes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, family={self.family.name!r})"


@dataclass(frozen=True, repr=False)
class MutatingVirus(Virus):
    """A variant able to mutate by copy error and by recombination."""

    copy_error_probability: float = field(default=0.0, compare=False)
    recombination_probability: float = field(default=0.0, compare=False)

    @property
    def mutating(self) -> bool:
        return True

    @classmethod
    def rate_params(cls) -> Tuple[str, ...]:
        return RATE_PARAMS + MUTATION_PARAMS
