"""Keyword and capability heuristics used when an ability is not catalogued.

The matching is inherently approximate: display names vary by language and
mod content, and a keyword can appear in an unrelated name. The classifier
consults this strategy only after the catalog has missed.
"""
from __future__ import annotations

from typing import Iterable, Optional

from tactics.ai.timing import AbilityRule, TimingCategory
from tactics.components.ability import Ability

T = TimingCategory

RELOAD_KEYWORDS = ("reload", "재장전")
HEAL_KEYWORDS = ("heal", "medi", "medkit", "medikit", "stimm", "triage", "치료", "메디킷", "회복")
DEFENSIVE_KEYWORDS = ("veil", "stance", "defend", "guard", "parry", "방어", "자세", "장막")
SELF_DAMAGE_KEYWORDS = ("blood", "oath", "sacrifice", "wound", "피의", "맹세", "희생")
FINISHER_KEYWORDS = ("dispatch", "execute", "finish", "deathblow", "처형", "마무리")
GAP_CLOSER_KEYWORDS = ("charge", "onslaught", "lunge", "돌격", "급습")
TAUNT_KEYWORDS = ("taunt", "provoke", "도발")

HP_COST_KEYWORDS = (
    "oath",
    "blood",
    "vengeance",
    "sacrifice",
    "fervour",
    "reckless",
    "exsanguination",
)
CONSUMABLE_KEYWORDS = ("ampoule", "vial", "potion", "grenade", "consumable", "throwable")


def _searchable_name(ability: Ability) -> str:
    return f"{ability.ability_id} {ability.name}".lower().replace("_", "").replace(" ", "")


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


class KeywordHeuristic:
    """Guess a timing category from capability flags and descriptive names."""

    def __init__(
        self,
        default_finisher_target_hp: float = 30.0,
        default_self_damage_hp: float = 50.0,
    ) -> None:
        self.default_finisher_target_hp = default_finisher_target_hp
        self.default_self_damage_hp = default_self_damage_hp

    def classify(self, ability: Ability) -> AbilityRule:
        category = self._category_for(ability)
        hp = 0.0
        target_hp = 0.0
        if category is T.FINISHER:
            target_hp = self.default_finisher_target_hp
        elif category is T.SELF_DAMAGE:
            hp = self.default_self_damage_hp
        return AbilityRule(
            category=category,
            hp_threshold=hp,
            target_hp_threshold=target_hp,
            single_use=ability.single_use,
            description="heuristic",
            from_catalog=False,
        )

    def _category_for(self, ability: Ability) -> TimingCategory:
        name = _searchable_name(ability)
        if ability.can_target_enemy and ability.can_target_ally and not ability.can_target_self:
            return T.DANGEROUS_AOE
        if contains_any(name, RELOAD_KEYWORDS):
            return T.RELOAD
        if not ability.can_target_enemy and contains_any(name, HEAL_KEYWORDS):
            return T.HEALING
        personal = ability.range <= 0
        if personal and ability.can_target_self and not ability.can_target_enemy and not ability.weapon_linked:
            if contains_any(name, DEFENSIVE_KEYWORDS):
                return T.TURN_ENDING
            return T.PRE_ATTACK_BUFF
        if (ability.can_target_self or personal) and contains_any(name, SELF_DAMAGE_KEYWORDS):
            return T.SELF_DAMAGE
        if contains_any(name, FINISHER_KEYWORDS):
            return T.FINISHER
        if ability.can_target_enemy and not ability.weapon_linked and contains_any(name, GAP_CLOSER_KEYWORDS):
            return T.GAP_CLOSER
        if contains_any(name, TAUNT_KEYWORDS):
            return T.TAUNT
        return T.NORMAL


def looks_like_hp_cost(ability: Ability) -> bool:
    name = _searchable_name(ability)
    if contains_any(name, CONSUMABLE_KEYWORDS):
        return False
    return contains_any(name, HP_COST_KEYWORDS)


def looks_like_consumable(ability: Optional[Ability]) -> bool:
    if ability is None:
        return False
    return contains_any(_searchable_name(ability), CONSUMABLE_KEYWORDS)
