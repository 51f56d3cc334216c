from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(Enum):
    DPS = "dps"
    TANK = "tank"
    SUPPORT = "support"
    BALANCED = "balanced"


@dataclass(slots=True)
class TacticalAgent:
    """Marker component for units whose actions the decision engine chooses.

    ``prefers_ranged`` left as None is inferred from the loadout: a unit whose
    longest-reaching attack exceeds melee reach is treated as ranged.
    """

    role: Role = Role.BALANCED
    prefers_ranged: Optional[bool] = None
    avoid_friendly_fire: bool = True
