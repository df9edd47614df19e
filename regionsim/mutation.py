"""
Mutation engine

Pure functions deriving new variants from mutating ones. Randomness comes
from a ``numpy.random.Generator`` supplied by the caller; input variants are
never modified.
"""

import logging
import re
from typing import Optional

import numpy as np

from .exceptions import FamilyMismatch
from .pathogen import DURATION_PARAMS, MutatingVirus, Virus

logger = logging.getLogger(__name__)

_NUMERIC_SUFFIX = re.compile(r"^(.*?)(\d+)$")


def derive_copy_error_name(name: str) -> str:
    """
    Successor name of a copy-error mutation.

    A trailing integer is incremented (``Flu2`` -> ``Flu3``); a name without
    one gets ``1`` appended (``Flu`` -> ``Flu1``).
    """
    match = _NUMERIC_SUFFIX.match(name)
    if match is None:
        return f"{name}1"
    base, number = match.groups()
    return f"{base}{int(number) + 1}"


def derive_recombination_name(virus_b: Virus, virus_a: Virus) -> str:
    return f"{virus_a.name}_{virus_b.name}"


def _require_mutating(virus: Virus) -> MutatingVirus:
    if not virus.mutating:
        raise TypeError(f"{virus.name} is a {virus.kind} variant and cannot mutate")
    return virus


def _coerce(name: str, value: float):
    if name in DURATION_PARAMS:
        return max(int(value), 0)
    return float(min(max(value, 0.0), 1.0))


def mutate_by_copy_error(
    virus: MutatingVirus, rng: Optional[np.random.Generator] = None
) -> MutatingVirus:
    """
    Mutate a variant through an independent copy error.

    Every numeric parameter is multiplied by its own factor drawn uniformly
    from ``[1 - v/100, 1 + v/100]`` where ``v`` is the family's maximum
    variation. Rates are clamped into [0, 1]; durations are truncated to
    integers.

    Args:
        virus: Mutating variant to copy
        rng: Source of randomness

    Returns:
        New variant of the same family with the successor name

    Raises:
        TypeError: If the variant is not of the mutating kind
    """
    virus = _require_mutating(virus)
    rng = rng if rng is not None else np.random.default_rng()
    variation = virus.family.max_variation / 100.0

    changes = {}
    for name in virus.numeric_params():
        factor = rng.uniform(1.0 - variation, 1.0 + variation)
        changes[name] = _coerce(name, getattr(virus, name) * factor)

    mutant = MutatingVirus(
        name=derive_copy_error_name(virus.name),
        family=virus.family,
        **changes,
    )
    logger.debug("Copy error turned %s into %s", virus.name, mutant.name)
    return mutant


def mutate_by_recombination(
    virus_b: MutatingVirus,
    virus_a: MutatingVirus,
    rng: Optional[np.random.Generator] = None,
) -> MutatingVirus:
    """
    Recombine two co-circulating variants of the same family.

    For every numeric parameter an independent weight ``p`` is drawn from
    [0, 1] and the child takes ``p * A + (1 - p) * B``, so each parameter lies
    between the parents' values. Durations are truncated to integers.

    Args:
        virus_b: Variant that mutates (B)
        virus_a: Co-circulating partner (A)
        rng: Source of randomness

    Returns:
        New variant named ``"{A}_{B}"``

    Raises:
        FamilyMismatch: If the variants belong to different families
    """
    if not virus_b.same_family(virus_a):
        raise FamilyMismatch(
            f"Cannot recombine {virus_b.name} ({virus_b.family.name}) with "
            f"{virus_a.name} ({virus_a.family.name})"
        )
    virus_b = _require_mutating(virus_b)
    virus_a = _require_mutating(virus_a)
    rng = rng if rng is not None else np.random.default_rng()

    changes = {}
    for name in virus_b.numeric_params():
        a, b = getattr(virus_a, name), getattr(virus_b, name)
        p = rng.uniform(0.0, 1.0)
        # keep float rounding inside the parents' range
        value = min(max(p * a + (1.0 - p) * b, min(a, b)), max(a, b))
        changes[name] = _coerce(name, value)

    child = MutatingVirus(
        name=derive_recombination_name(virus_b, virus_a),
        family=virus_a.family,
        **changes,
    )
    logger.debug("Recombined %s and %s into %s", virus_a.name, virus_b.name, child.name)
    return child
