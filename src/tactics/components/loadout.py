from dataclasses import dataclass, field
from typing import List

@dataclass(slots=True)
class Loadout:
    """Ability entity ids a combatant can draw on, in the host's listing order."""
    ability_entities: List[int] = field(default_factory=list)
