from dataclasses import dataclass
from typing import Optional

from tactics.components.area_pattern import AreaPattern

@dataclass(slots=True)
class Ability:
    """Static description of an ability a combatant can use.

    Fields:
      ability_id: Stable, locale-independent identifier (catalog key).
      name: Descriptive display name; may be in any display language.
      ap_cost: Action points consumed on use.
      range: Maximum reach in grid units; 0 means personal / self only.
      min_range: Closest distance the ability may be used at.
      can_target_self / can_target_enemy / can_target_ally: Capability flags.
      can_target_point: Aims at a location rather than a unit.
      weapon_linked: Fired through a weapon (attacks, bursts, reloads).
      single_use: Usable at most once per combat encounter.
      is_area: Host declared the ability as an area effect.
      pattern: Declared effect shape, if any.
      cooldown: Rounds required before re-use.
    """
    ability_id: str
    name: str = ""
    ap_cost: float = 1.0
    range: float = 1.0
    min_range: float = 0.0
    can_target_self: bool = False
    can_target_enemy: bool = True
    can_target_ally: bool = False
    can_target_point: bool = False
    weapon_linked: bool = False
    single_use: bool = False
    is_area: bool = False
    pattern: Optional[AreaPattern] = None
    cooldown: int = 0

    def display_name(self) -> str:
        return self.name or self.ability_id

    def is_self_only(self) -> bool:
        return self.can_target_self and not self.can_target_enemy and not self.can_target_ally
