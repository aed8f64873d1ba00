"""Diagnostic spatial constraints derived from pairwise footprint overlap."""
from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Iterable, List, Tuple

from .entities import Component
from .geometry import penetration_depth

COLLISION = "collision"


@dataclass(frozen=True)
class Constraint:
    """A detected overlap. Informational only; nothing is enforced."""

    kind: str
    ids: Tuple[str, str]
    message: str
    depth: float = 0.0

    def involves(self, comp_id: str) -> bool:
        return comp_id in self.ids

    def as_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "ids": list(self.ids),
            "message": self.message,
            "depth": self.depth,
        }


def check_constraints(components: Iterable[Component]) -> List[Constraint]:
    """Rebuild the full constraint set for the given components.

    Each unordered pair is visited once, in insertion order, so the output is
    deterministic for a given layout.
    """
    result: List[Constraint] = []
    for a, b in combinations(list(components), 2):
        if not a.overlaps_with(b):
            continue
        depth = penetration_depth(a.extent, a.pose, b.extent, b.pose)
        result.append(
            Constraint(
                kind=COLLISION,
                ids=(a.id, b.id),
                message=f"{a.kind.value} overlaps {b.kind.value}",
                depth=depth,
            )
        )
    return result


__all__ = ["COLLISION", "Constraint", "check_constraints"]
