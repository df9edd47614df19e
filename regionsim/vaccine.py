"""
Interventions: vaccines and confinements.
"""

from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidQuantity, check_percentage
from .pathogen import Family, Virus

INHIBITING = "inhibiting"
ATTENUATING = "attenuating"
VACCINE_KINDS = (INHIBITING, ATTENUATING)


@dataclass(frozen=True, eq=False)
class Vaccine:
    """
    A vaccine targeting one variant and, through it, the variant's family.

    Inhibiting vaccines protect ``effectiveness`` percent of the people they
    are administered to. Attenuating vaccines reduce the severity parameters
    of every tracked family member while they are active.

    Use the ``inhibiting`` and ``attenuating`` constructors rather than
    building instances directly.
    """

    name: str
    kind: str
    target: Virus
    activation_time: int
    duration: int
    effectiveness: Optional[float] = None
    mortality_rate_reduction: float = 0.0
    disease_duration_reduction: float = 0.0
    disease_probability_reduction: float = 0.0
    contagion_rate_reduction: float = 0.0

    def __post_init__(self):
        if self.kind not in VACCINE_KINDS:
            raise ValueError(f"Vaccine kind must be one of {VACCINE_KINDS}, got {self.kind!r}")
        if self.activation_time < 0 or self.duration < 0:
            raise InvalidQuantity(
                f"Vaccine {self.name} timers cannot be negative "
                f"(activation={self.activation_time}, duration={self.duration})"
            )
        if self.kind == INHIBITING:
            check_percentage(self.effectiveness, "effectiveness")
        for name in (
            "mortality_rate_reduction",
            "disease_duration_reduction",
            "disease_probability_reduction",
            "contagion_rate_reduction",
        ):
            check_percentage(getattr(self, name), name)

    @classmethod
    def inhibiting(
        cls,
        name: str,
        target: Virus,
        effectiveness: float,
        activation_time: int,
        duration: int,
    ) -> "Vaccine":
        return cls(name, INHIBITING, target, activation_time, duration, effectiveness=effectiveness)

    @classmethod
    def attenuating(
        cls,
        name: str,
        target: Virus,
        activation_time: int,
        duration: int,
        mortality_rate_reduction: float = 0.0,
        disease_duration_reduction: float = 0.0,
        disease_probability_reduction: float = 0.0,
        contagion_rate_reduction: float = 0.0,
    ) -> "Vaccine":
        return cls(
            name,
            ATTENUATING,
            target,
            activation_time,
            duration,
            mortality_rate_reduction=mortality_rate_reduction,
            disease_duration_reduction=disease_duration_reduction,
            disease_probability_reduction=disease_probability_reduction,
            contagion_rate_reduction=contagion_rate_reduction,
        )

    @property
    def family(self) -> Family:
        return self.target.family

    @property
    def is_inhibiting(self) -> bool:
        return self.kind == INHIBITING

    @property
    def is_attenuating(self) -> bool:
        return self.kind == ATTENUATING

    def covers(self, virus: Virus) -> bool:
        """True if the variant belongs to the family this vaccine targets."""
        return virus.family is self.family

    def doses_protected(self, doses: int) -> int:
        """Number of dosed people actually counted as vaccinated."""
        if self.is_inhibiting:
            return max(int(doses * self.effectiveness / 100.0), 0)
        return doses

    def attenuate(self, virus: Virus) -> Virus:
        """
        Clone a variant with this vaccine's severity reductions applied.

        Mortality rate, disease duration, disease probability and contagion
        rate are each reduced by the configured percentage. The clone keeps
        the variant's identity and records the vaccine in ``attenuated_by``.
        """
        if not self.is_attenuating:
            return virus
        return virus.evolve(
            mortality_rate=virus.mortality_rate * (100 - self.mortality_rate_reduction) / 100,
            disease_duration=int(
                virus.disease_duration * (100 - self.disease_duration_reduction) / 100
            ),
            disease_probability=virus.disease_probability
            * (100 - self.disease_probability_reduction)
            / 100,
            contagion_rate=virus.contagion_rate * (100 - self.contagion_rate_reduction) / 100,
            attenuated_by=virus.attenuated_by + (self.name,),
        )

    def __repr__(self) -> str:
        return f"Vaccine({self.name!r}, {self.kind}, target={self.target.name!r})"


@dataclass(frozen=True)
class Confinement:
    """
    Lockdown parameters.

    Args:
        duration: Number of steps the lockdown lasts
        mobility_reduction: Mobility value used by the transmission model
            while the lockdown is active
    """

    duration: int
    mobility_reduction: float

    def __post_init__(self):
        if self.duration < 0:
            raise InvalidQuantity(f"Confinement duration cannot be negative, got {self.duration}")
        if self.mobility_reduction < 0:
            raise InvalidQuantity(
                f"Confinement mobility cannot be negative, got {self.mobility_reduction}"
            )
