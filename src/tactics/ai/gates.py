from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.timing import AbilityRule, TimingCategory

T = TimingCategory


@dataclass(frozen=True, slots=True)
class GateContext:
    hp_percent: float
    first_action_done: bool
    enemy_hp_percents: Sequence[float]
    ally_hp_percents: Sequence[float]
    momentum: int
    weapon_needs_reload: bool
    config: TacticalConfig = DEFAULT_CONFIG


Gate = Callable[[AbilityRule, GateContext], Optional[str]]


def _always(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    return None


def _own_hp_floor(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    if rule.hp_threshold > 0 and ctx.hp_percent < rule.hp_threshold:
        return f"health {ctx.hp_percent:.0f}% below {rule.hp_threshold:.0f}%"
    return None


def _post_first_action(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    if not ctx.first_action_done:
        return "waiting for first action"
    return _own_hp_floor(rule, ctx)


def _finisher(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    threshold = rule.target_hp_threshold or ctx.config.finisher_target_hp_percent
    if not any(hp <= threshold for hp in ctx.enemy_hp_percents):
        return f"no enemy at or below {threshold:.0f}%"
    return None


def _self_damage(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    threshold = rule.hp_threshold or ctx.config.self_damage_hp_percent
    if ctx.hp_percent < threshold:
        return f"health {ctx.hp_percent:.0f}% too low for self damage ({threshold:.0f}%)"
    return None


def _emergency(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    limit = ctx.config.emergency_ability_hp_percent
    if ctx.hp_percent <= limit:
        return None
    if any(hp <= limit for hp in ctx.ally_hp_percents):
        return None
    return "no emergency"


def _heroic(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    if ctx.momentum < ctx.config.momentum_heroic_threshold:
        return f"momentum {ctx.momentum} below {ctx.config.momentum_heroic_threshold}"
    return None


def _desperate(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    if ctx.momentum > ctx.config.momentum_desperate_threshold:
        return f"momentum {ctx.momentum} above {ctx.config.momentum_desperate_threshold}"
    return None


def _reload(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    if not ctx.weapon_needs_reload:
        return "magazine full"
    return None


_GATES: Dict[TimingCategory, Gate] = {
    T.NORMAL: _always,
    T.PRE_COMBAT_BUFF: _always,
    T.PRE_ATTACK_BUFF: _always,
    T.POST_FIRST_ACTION: _post_first_action,
    T.TURN_ENDING: _own_hp_floor,
    T.FINISHER: _finisher,
    T.SELF_DAMAGE: _self_damage,
    T.DANGEROUS_AOE: _always,
    T.DEBUFF: _always,
    T.TAUNT: _always,
    T.RELOAD: _reload,
    T.HEALING: _always,
    T.GAP_CLOSER: _always,
    T.EMERGENCY: _emergency,
    T.RIGHTEOUS_FURY: _always,
    T.STACKING_BUFF: _always,
    T.HEROIC_ACT: _heroic,
    T.DESPERATE_MEASURE: _desperate,
    T.MOMENTUM_GENERATION: _always,
}

_missing = set(TimingCategory) - set(_GATES)
if _missing:
    raise RuntimeError(f"Timing gates missing for: {sorted(c.value for c in _missing)}")


def timing_gate(rule: AbilityRule, ctx: GateContext) -> Optional[str]:
    """Return why the ability must wait, or None when its timing allows use now."""
    return _GATES[rule.category](rule, ctx)
