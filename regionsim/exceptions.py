"""
Exception hierarchy for the regionsim package.

Every error raised by the simulation core derives from SimulationError, and
additionally from the built-in exception that best describes it so callers
can catch either.
"""


class SimulationError(Exception):
    """Base class for all simulation errors."""


class InvalidQuantity(SimulationError, ValueError):
    """Negative or otherwise impossible count, rate or duration."""


class InvalidPercentage(SimulationError, ValueError):
    """Percentage outside of [0, 100]."""


class UnknownVariant(SimulationError, LookupError):
    """Variant never present in the region or simulator."""


class UnknownRegion(SimulationError, LookupError):
    """Region not registered in the simulator."""


class UnknownVaccine(SimulationError, LookupError):
    """Vaccine not registered in the simulator."""


class FamilyMismatch(SimulationError, ValueError):
    """Recombination requested between variants of different families."""


class EmptyClosureTarget(SimulationError, ValueError):
    """Closure or opening requested with no target regions."""


def check_percentage(value: float, what: str = "percentage") -> float:
    """
    Validate that a percentage lies in [0, 100].

    Args:
        value: Percentage to check
        what: Name used in the error message

    Returns:
        The value unchanged

    Raises:
        InvalidPercentage: If the value is outside [0, 100]
    """
    if value is None or not 0 <= value <= 100:
        raise InvalidPercentage(f"{what} must be between 0 and 100, got {value}")
    return value


def check_count(value: int, what: str = "count") -> int:
    """Validate that a count is a non-negative integer."""
    if value is None or value < 0:
        raise InvalidQuantity(f"{what} cannot be negative, got {value}")
    return int(value)
