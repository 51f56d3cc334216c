from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from tactics import constants as C


@dataclass(frozen=True, slots=True)
class TacticalConfig:
    """Tuning knobs shared by every stage of the decision pipeline."""

    emergency_hp_percent: float = C.EMERGENCY_HP_PERCENT
    emergency_ability_hp_percent: float = C.EMERGENCY_ABILITY_HP_PERCENT
    safety_fallback_hp_percent: float = C.SAFETY_FALLBACK_HP_PERCENT
    seek_cover_hp_percent: float = C.SEEK_COVER_HP_PERCENT
    finisher_target_hp_percent: float = C.DEFAULT_FINISHER_TARGET_HP_PERCENT
    self_damage_hp_percent: float = C.DEFAULT_SELF_DAMAGE_HP_PERCENT
    retreat_danger_radius: float = C.RETREAT_DANGER_RADIUS
    move_ap_reserve: float = C.MOVE_AP_RESERVE
    buff_multiplier: float = C.BUFF_MULTIPLIER
    melee_reach: float = C.MELEE_REACH

    momentum_start: int = C.MOMENTUM_START
    momentum_heroic_threshold: int = C.MOMENTUM_HEROIC_THRESHOLD
    momentum_desperate_threshold: int = C.MOMENTUM_DESPERATE_THRESHOLD

    hp_percent_weight: float = C.HP_PERCENT_WEIGHT
    hp_absolute_weight: float = C.HP_ABSOLUTE_WEIGHT
    hp_absolute_numerator: float = C.HP_ABSOLUTE_NUMERATOR
    hp_absolute_floor: float = C.HP_ABSOLUTE_FLOOR
    hp_absolute_cap: float = C.HP_ABSOLUTE_CAP
    distance_weight: float = C.DISTANCE_WEIGHT
    killable_now_bonus: float = C.KILLABLE_NOW_BONUS
    killable_soon_bonus: float = C.KILLABLE_SOON_BONUS
    killable_now_factor: float = C.KILLABLE_NOW_FACTOR
    killable_soon_factor: float = C.KILLABLE_SOON_FACTOR
    not_hittable_penalty: float = C.NOT_HITTABLE_PENALTY

    damage_per_level: int = C.DAMAGE_PER_LEVEL
    damage_base: int = C.DAMAGE_BASE
    unarmed_damage_factor: float = C.UNARMED_DAMAGE_FACTOR

    min_acceptable_action_score: float = C.MIN_ACCEPTABLE_ACTION_SCORE

    area_weapon_safety_radius: float = C.AREA_WEAPON_SAFETY_RADIUS
    aoe_safety_radius: float = C.AOE_SAFETY_RADIUS
    aoe_max_allies_exposed: int = C.AOE_MAX_ALLIES_EXPOSED
    aoe_efficiency_radius: float = C.AOE_EFFICIENCY_RADIUS
    aoe_min_enemies: int = C.AOE_MIN_ENEMIES
    aoe_origin_clearance: float = C.AOE_ORIGIN_CLEARANCE

    repeat_window_seconds: float = C.REPEAT_WINDOW_SECONDS
    max_consecutive_failures: int = C.MAX_CONSECUTIVE_FAILURES
    max_turn_steps: int = C.MAX_TURN_STEPS

    round_duration_seconds: float = C.ROUND_DURATION_SECONDS
    sweep_interval_ticks: int = C.SWEEP_INTERVAL_TICKS

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "TacticalConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown tactical config keys: {', '.join(unknown)}")
        return cls(**dict(values))

    def replace(self, **changes: Any) -> "TacticalConfig":
        return dataclasses.replace(self, **changes)


DEFAULT_CONFIG = TacticalConfig()
