"""Authoritative ability timing catalog.

Entries are keyed by the ability's stable identifier, never by its display
name, so lookups behave the same whatever language the host runs in. The
default table is an immutable mapping; hosts that ship their own content build
an :class:`AbilityCatalog` from an extended copy.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from tactics.ai.timing import AbilityRule, TimingCategory

T = TimingCategory


def normalize_ability_id(ability_id: str) -> str:
    """Lowercase and drop separators plus a trailing "ability" suffix."""
    if not ability_id:
        return ""
    key = ability_id.lower()
    for sep in (" ", "_", "-"):
        key = key.replace(sep, "")
    if key.endswith("ability") and len(key) > len("ability"):
        key = key[: -len("ability")]
    return key


def _rule(
    category: TimingCategory,
    hp: float = 0.0,
    target_hp: float = 0.0,
    single: bool = False,
    desc: str = "",
) -> AbilityRule:
    return AbilityRule(
        category=category,
        hp_threshold=hp,
        target_hp_threshold=target_hp,
        single_use=single,
        description=desc,
    )


_DEFAULT_RULES: Dict[str, AbilityRule] = {
    # Extra actions after the first one
    "run_and_gun": _rule(T.POST_FIRST_ACTION, desc="Extra attack after the first action"),
    "daring_breach": _rule(T.POST_FIRST_ACTION, hp=30, desc="Resets AP after an action"),
    # Defensive stances used before engaging
    "defensive_stance": _rule(T.PRE_COMBAT_BUFF, desc="Defence up"),
    "bulwark": _rule(T.PRE_COMBAT_BUFF, desc="Defence up"),
    "brace_for_impact": _rule(T.PRE_COMBAT_BUFF, desc="Damage reduction"),
    "shield_wall": _rule(T.PRE_COMBAT_BUFF),
    "hold_the_line": _rule(T.PRE_COMBAT_BUFF),
    "fortify": _rule(T.PRE_COMBAT_BUFF),
    "hunker_down": _rule(T.PRE_COMBAT_BUFF),
    "entrench": _rule(T.PRE_COMBAT_BUFF),
    "iron_guard": _rule(T.PRE_COMBAT_BUFF),
    # Buffs cast right before attacking
    "concentrated_fire": _rule(T.PRE_ATTACK_BUFF, desc="Accuracy up for the next attack"),
    "analyse_enemy": _rule(T.PRE_ATTACK_BUFF),
    "fighter_charge": _rule(T.PRE_ATTACK_BUFF),
    "voice_of_command": _rule(T.PRE_ATTACK_BUFF, single=True),
    "finest_hour": _rule(T.PRE_ATTACK_BUFF, single=True),
    "bring_it_down": _rule(T.PRE_ATTACK_BUFF, single=True),
    "mark_prey": _rule(T.PRE_ATTACK_BUFF, single=True),
    # Turn enders
    "veil_of_blades": _rule(T.TURN_ENDING, hp=50, desc="Counterattack stance"),
    "stalwart_defense": _rule(T.TURN_ENDING),
    "shield_riposte": _rule(T.TURN_ENDING),
    # Finishers
    "dispatch": _rule(T.FINISHER, target_hp=30, desc="Execute a wounded enemy"),
    "execute": _rule(T.FINISHER, target_hp=30),
    "death_blow": _rule(T.FINISHER, target_hp=25),
    # Abilities paid for with the caster's own health
    "blood_oath": _rule(T.SELF_DAMAGE, hp=60, single=True, desc="Spends health for damage"),
    "oath_of_vengeance": _rule(T.SELF_DAMAGE, hp=60, single=True),
    "ensanguinate": _rule(T.SELF_DAMAGE, hp=50),
    "reckless_abandon": _rule(T.SELF_DAMAGE, hp=70),
    "metabolic_overcharge": _rule(T.SELF_DAMAGE, hp=80, single=True),
    # Area effects that ignore allegiance
    "lidless_stare": _rule(T.DANGEROUS_AOE, desc="Cone that hits everyone"),
    "blade_dance": _rule(T.DANGEROUS_AOE, desc="Random melee strikes around the caster"),
    "scatter_shot": _rule(T.DANGEROUS_AOE),
    # Debuffs
    "expose_weakness": _rule(T.DEBUFF),
    "dismantling_attack": _rule(T.DEBUFF),
    # Buffs that persist and stack
    "trench_line": _rule(T.STACKING_BUFF),
    "listen_to_order": _rule(T.STACKING_BUFF),
    # Triggered after kills
    "revel_in_slaughter": _rule(T.RIGHTEOUS_FURY),
    "holy_rage": _rule(T.RIGHTEOUS_FURY),
    "righteous_fury": _rule(T.RIGHTEOUS_FURY),
    # Momentum
    "heroic_act": _rule(T.HEROIC_ACT, single=True),
    "heroic_strike": _rule(T.HEROIC_ACT, single=True),
    "desperate_measure": _rule(T.DESPERATE_MEASURE, single=True),
    "last_stand": _rule(T.DESPERATE_MEASURE, single=True),
    "war_hymn": _rule(T.MOMENTUM_GENERATION),
    "assign_objective": _rule(T.MOMENTUM_GENERATION),
    "inspire": _rule(T.MOMENTUM_GENERATION),
    # Threat
    "taunt": _rule(T.TAUNT),
    "provoke": _rule(T.TAUNT),
    "challenging_roar": _rule(T.TAUNT),
    "draw_fire": _rule(T.TAUNT),
    # Ammunition
    "reload": _rule(T.RELOAD),
    "plasma_reload": _rule(T.RELOAD),
    "tactical_reload": _rule(T.RELOAD, desc="Reload ignoring attacks of opportunity"),
    # Healing
    "medikit": _rule(T.HEALING),
    "battle_medic_kit": _rule(T.HEALING),
    "combat_stimm_medikit": _rule(T.HEALING),
    "skin_patch": _rule(T.HEALING),
    "trauma_care": _rule(T.HEALING),
    "emergency_stimm": _rule(T.EMERGENCY, desc="Only when someone is about to fall"),
    "field_triage": _rule(T.EMERGENCY),
    # Movement attacks
    "charge": _rule(T.GAP_CLOSER),
    "unstoppable_onslaught": _rule(T.GAP_CLOSER),
    "ambush": _rule(T.GAP_CLOSER),
    # Movement abilities that behave like ordinary attacks
    "death_from_above": _rule(T.NORMAL),
    "pounce": _rule(T.NORMAL),
    "shadow_step": _rule(T.NORMAL),
}


class AbilityCatalog:
    """Read-only lookup from stable ability id to :class:`AbilityRule`."""

    def __init__(self, rules: Mapping[str, AbilityRule]) -> None:
        normalized: Dict[str, AbilityRule] = {}
        for key, rule in rules.items():
            norm = normalize_ability_id(key)
            if not norm:
                raise ValueError(f"Catalog key '{key}' is empty after normalization")
            if norm in normalized and normalized[norm] != rule:
                raise ValueError(f"Catalog key '{key}' collides with another entry")
            normalized[norm] = rule
        self._rules: Mapping[str, AbilityRule] = MappingProxyType(normalized)
        # Longest keys first so variant lookups pick the most specific entry.
        self._variant_keys: Tuple[str, ...] = tuple(
            sorted(normalized, key=lambda k: (-len(k), k))
        )

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, ability_id: object) -> bool:
        return isinstance(ability_id, str) and normalize_ability_id(ability_id) in self._rules

    def lookup(self, ability_id: str) -> Optional[AbilityRule]:
        return self._rules.get(normalize_ability_id(ability_id))

    def lookup_variant(self, ability_id: str) -> Optional[AbilityRule]:
        """Match ids such as ``lidless_stare_ultimate`` to their base entry."""
        norm = normalize_ability_id(ability_id)
        if not norm:
            return None
        for key in self._variant_keys:
            if key in norm:
                return self._rules[key]
        return None

    def rules(self) -> Mapping[str, AbilityRule]:
        return self._rules

    def extended(self, extra: Mapping[str, AbilityRule]) -> "AbilityCatalog":
        combined: Dict[str, AbilityRule] = dict(self._rules)
        for key, rule in extra.items():
            combined[normalize_ability_id(key)] = rule
        return AbilityCatalog(combined)


DEFAULT_CATALOG = AbilityCatalog(_DEFAULT_RULES)

__all__ = ["AbilityCatalog", "DEFAULT_CATALOG", "normalize_ability_id"]
