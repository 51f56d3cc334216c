from dataclasses import dataclass
from enum import Enum


class Faction(Enum):
    PLAYER = "player"
    ALLY = "ally"
    ENEMY = "enemy"
    NEUTRAL = "neutral"

    def is_hostile_to(self, other: "Faction") -> bool:
        if self is Faction.NEUTRAL or other is Faction.NEUTRAL:
            return False
        return (self is Faction.ENEMY) != (other is Faction.ENEMY)

    def is_friendly_to(self, other: "Faction") -> bool:
        if self is Faction.NEUTRAL or other is Faction.NEUTRAL:
            return False
        return not self.is_hostile_to(other)


@dataclass(slots=True)
class Combatant:
    """Identity of a unit taking part in an encounter.

    Fields:
      name: Display / reference name.
      faction: Side the unit fights for.
      level: Tier used by the coarse damage estimate.
      armed: Whether the unit carries a weapon.
      in_combat: False once the unit has left the encounter (fled, despawned).
    """
    name: str
    faction: Faction
    level: int = 1
    armed: bool = True
    in_combat: bool = True
