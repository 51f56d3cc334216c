from dataclasses import dataclass, field
from typing import Dict, Optional

from tactics.components.combatant import Faction


@dataclass(slots=True)
class CombatState:
    """Encounter-wide state published by the host.

    ``round`` is the authoritative round counter when the host exposes one;
    None means the round clock has to estimate it. ``momentum`` is keyed by
    faction and missing entries read as the starting momentum.
    """

    active: bool = False
    round: Optional[int] = None
    momentum: Dict[Faction, int] = field(default_factory=dict)
    elapsed: float = 0.0
