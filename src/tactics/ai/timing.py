from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TimingCategory(Enum):
    """Tactical moment at which an ability is most effective."""

    NORMAL = "normal"
    PRE_COMBAT_BUFF = "pre_combat_buff"
    PRE_ATTACK_BUFF = "pre_attack_buff"
    POST_FIRST_ACTION = "post_first_action"
    TURN_ENDING = "turn_ending"
    FINISHER = "finisher"
    SELF_DAMAGE = "self_damage"
    DANGEROUS_AOE = "dangerous_aoe"
    DEBUFF = "debuff"
    TAUNT = "taunt"
    RELOAD = "reload"
    HEALING = "healing"
    GAP_CLOSER = "gap_closer"
    EMERGENCY = "emergency"
    RIGHTEOUS_FURY = "righteous_fury"
    STACKING_BUFF = "stacking_buff"
    HEROIC_ACT = "heroic_act"
    DESPERATE_MEASURE = "desperate_measure"
    MOMENTUM_GENERATION = "momentum_generation"


# Buffs never count as the unit's first action.
BUFF_CATEGORIES = frozenset(
    {
        TimingCategory.PRE_COMBAT_BUFF,
        TimingCategory.PRE_ATTACK_BUFF,
        TimingCategory.STACKING_BUFF,
    }
)

HEAL_CATEGORIES = frozenset({TimingCategory.HEALING, TimingCategory.EMERGENCY})

# Cast on the caster as soon as they are available; one activation at a time.
SELF_USE_CATEGORIES = frozenset(
    {
        TimingCategory.RIGHTEOUS_FURY,
        TimingCategory.HEROIC_ACT,
        TimingCategory.MOMENTUM_GENERATION,
    }
)

NON_ATTACK_CATEGORIES = frozenset(
    {
        TimingCategory.PRE_COMBAT_BUFF,
        TimingCategory.PRE_ATTACK_BUFF,
        TimingCategory.STACKING_BUFF,
        TimingCategory.TURN_ENDING,
        TimingCategory.RELOAD,
        TimingCategory.HEALING,
        TimingCategory.EMERGENCY,
        TimingCategory.MOMENTUM_GENERATION,
    }
)


@dataclass(frozen=True, slots=True)
class AbilityRule:
    """Resolved classification of one ability.

    ``hp_threshold`` is the minimum own health percentage the ability needs
    (self-damage, risky post-action abilities). ``target_hp_threshold`` is the
    health percentage a target must be at or under (finishers).
    """

    category: TimingCategory
    hp_threshold: float = 0.0
    target_hp_threshold: float = 0.0
    single_use: bool = False
    description: str = ""
    from_catalog: bool = True


def is_attack_category(category: TimingCategory) -> bool:
    """Categories whose abilities deal damage to enemies."""
    return category not in NON_ATTACK_CATEGORIES and category not in (
        TimingCategory.DEBUFF,
        TimingCategory.TAUNT,
    )
