"""
Closure propagation over the region graph.

A closure is a directional flag a region keeps for each neighbour; setting
it stops the flow the region receives from that neighbour without removing
the edge, so the travel percentage survives a later reopening.

Propagation walks the graph with an explicit worklist and a visited set:
the origin flags every target it borders, then each reached target flags
the other targets it borders, and so on. Cycles in the neighbour graph are
visited once.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Iterable

from .exceptions import EmptyClosureTarget

if TYPE_CHECKING:
    from .region import Region

logger = logging.getLogger(__name__)


def _propagate(origin: "Region", targets: Iterable["Region"], closed: bool) -> int:
    targets = list(dict.fromkeys(targets))
    if not targets:
        raise EmptyClosureTarget(
            f"No target regions given to {'close' if closed else 'open'} from {origin.name}"
        )

    flagged = 0
    visited = {origin}
    worklist = deque([origin])
    while worklist:
        current = worklist.popleft()
        for target in targets:
            if target is current or not current.is_neighbor(target):
                continue
            current.set_closure(target, closed)
            flagged += 1
            if target not in visited:
                visited.add(target)
                worklist.append(target)
    return flagged


def apply_closure(origin: "Region", targets: Iterable["Region"]) -> int:
    """
    Close flow from the target regions, propagating through the target set.

    Args:
        origin: Region requesting the closure
        targets: Regions to close against

    Returns:
        Number of directional flags set

    Raises:
        EmptyClosureTarget: If no targets are given
    """
    flagged = _propagate(origin, targets, closed=True)
    logger.debug("Closure from %s set %d flags", origin.name, flagged)
    return flagged


def relax_closure(origin: "Region", targets: Iterable["Region"]) -> int:
    """Reopen flow from the target regions; mirror of ``apply_closure``."""
    flagged = _propagate(origin, targets, closed=False)
    logger.debug("Opening from %s cleared %d flags", origin.name, flagged)
    return flagged
