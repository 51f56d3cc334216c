"""Ability builders discovered by ``tactics.factories.abilities``."""

from .support import create_ability_emergency_stimm, create_ability_medikit, create_ability_war_hymn
from .talents import (
    create_ability_blood_oath,
    create_ability_charge,
    create_ability_concentrated_fire,
    create_ability_defensive_stance,
    create_ability_dispatch,
    create_ability_expose_weakness,
    create_ability_frag_grenade,
    create_ability_heroic_strike,
    create_ability_lidless_stare,
    create_ability_righteous_fury,
    create_ability_run_and_gun,
    create_ability_taunt,
    create_ability_veil_of_blades,
)
from .weapons import (
    create_ability_burst_fire,
    create_ability_flamer,
    create_ability_reload,
    create_ability_single_shot,
    create_ability_sword_strike,
)

__all__ = [
    "create_ability_blood_oath",
    "create_ability_burst_fire",
    "create_ability_charge",
    "create_ability_concentrated_fire",
    "create_ability_defensive_stance",
    "create_ability_dispatch",
    "create_ability_emergency_stimm",
    "create_ability_expose_weakness",
    "create_ability_flamer",
    "create_ability_frag_grenade",
    "create_ability_heroic_strike",
    "create_ability_lidless_stare",
    "create_ability_medikit",
    "create_ability_reload",
    "create_ability_righteous_fury",
    "create_ability_run_and_gun",
    "create_ability_single_shot",
    "create_ability_sword_strike",
    "create_ability_taunt",
    "create_ability_veil_of_blades",
    "create_ability_war_hymn",
]
