"""
Variant arena

Every variant tracked by a region is stored once in an arena and referred
to by a stable integer handle. Ledgers and statistics are keyed by handle,
so swapping a variant's parameters (a vaccine attenuating it) never moves
its statistics.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from .exceptions import UnknownVariant
from .pathogen import Family, Virus
from .vaccine import Vaccine


@dataclass
class VariantRecord:
    """
    One variant lineage.

    ``original`` never changes; ``active`` is the parameter snapshot the
    region engine uses, equal to ``original`` with every attenuation in
    ``attenuations`` applied in order.
    """

    handle: int
    original: Virus
    active: Virus
    attenuations: "OrderedDict[str, Tuple[Vaccine, int]]" = field(default_factory=OrderedDict)

    def rebuild(self) -> None:
        snapshot = self.original
        for vaccine, _ in self.attenuations.values():
            snapshot = vaccine.attenuate(snapshot)
        self.active = snapshot


class VariantArena:
    """Registry of variant lineages indexed by integer handles."""

    def __init__(self):
        self._records: List[VariantRecord] = []
        self._index: Dict[Virus, int] = {}

    def register(self, virus: Virus) -> Tuple[int, bool]:
        """
        Register a variant, or find it if an equal one is already present.

        Returns:
            Tuple of (handle, created)
        """
        handle = self._index.get(virus)
        if handle is not None:
            return handle, False
        handle = len(self._records)
        self._records.append(VariantRecord(handle, virus, virus))
        self._index[virus] = handle
        return handle, True

    def handle_of(self, virus: Virus) -> int:
        try:
            return self._index[virus]
        except KeyError:
            raise UnknownVariant(f"Variant {virus.name} is not tracked") from None

    def __contains__(self, virus: Virus) -> bool:
        return virus in self._index

    def variant(self, handle: int) -> Virus:
        """Active parameter snapshot."""
        return self._records[handle].active

    def original(self, handle: int) -> Virus:
        return self._records[handle].original

    def family_handles(self, family: Family) -> List[int]:
        return [r.handle for r in self._records if r.original.family is family]

    def attenuate(self, handle: int, vaccine: Vaccine) -> Virus:
        """Apply an attenuating vaccine to a lineage; repeated applications are counted."""
        record = self._records[handle]
        _, count = record.attenuations.get(vaccine.name, (vaccine, 0))
        record.attenuations[vaccine.name] = (vaccine, count + 1)
        record.rebuild()
        return record.active

    def restore(self, handle: int, vaccine: Vaccine) -> Virus:
        """Undo one application of an attenuating vaccine."""
        record = self._records[handle]
        if vaccine.name in record.attenuations:
            _, count = record.attenuations[vaccine.name]
            if count > 1:
                record.attenuations[vaccine.name] = (vaccine, count - 1)
            else:
                del record.attenuations[vaccine.name]
            record.rebuild()
        return record.active

    def __iter__(self) -> Iterator[VariantRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
