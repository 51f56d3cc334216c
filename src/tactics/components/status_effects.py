from dataclasses import dataclass, field
from typing import Set


@dataclass(slots=True)
class StatusEffects:
    """Active status slugs on a unit. Self buffs are recorded by ability id."""

    active: Set[str] = field(default_factory=set)

    def has(self, slug: str) -> bool:
        return slug in self.active
