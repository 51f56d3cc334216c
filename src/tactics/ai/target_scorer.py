from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.snapshot import UnitView
from tactics.components.tactical_agent import Role
from tactics import constants as C

logger = logging.getLogger(__name__)


class SelectionMode(Enum):
    PREFER_KILLABLE = "prefer_killable"
    PREFER_CLOSE = "prefer_close"
    DEFAULT = "default"


ROLE_SELECTION_MODES = {
    Role.DPS: (SelectionMode.PREFER_KILLABLE, SelectionMode.DEFAULT),
    Role.TANK: (SelectionMode.PREFER_CLOSE, SelectionMode.DEFAULT),
    Role.SUPPORT: (SelectionMode.PREFER_KILLABLE, SelectionMode.DEFAULT),
    Role.BALANCED: (SelectionMode.PREFER_KILLABLE, SelectionMode.DEFAULT),
}


def selection_modes(role: Role, prefers_ranged: bool) -> Tuple[SelectionMode, ...]:
    """Mode order for a unit; melee units try the closest target before the best one."""
    modes = ROLE_SELECTION_MODES[role]
    if prefers_ranged or SelectionMode.PREFER_CLOSE in modes:
        return modes
    return (SelectionMode.PREFER_KILLABLE, SelectionMode.PREFER_CLOSE, SelectionMode.DEFAULT)


@dataclass(frozen=True, slots=True)
class TargetScore:
    entity: int
    distance: float
    hp_percent_score: float
    hp_absolute_score: float
    distance_score: float
    killable_bonus: float
    range_adjustment: float = 0.0
    hittable: bool = True
    hittable_penalty: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.hp_percent_score
            + self.hp_absolute_score
            + self.distance_score
            + self.killable_bonus
            + self.range_adjustment
            + self.hittable_penalty
        )

    @property
    def killable(self) -> bool:
        return self.killable_bonus > 0

    @property
    def proximity_score(self) -> float:
        return self.distance_score + self.hp_percent_score


def base_damage(level: int, armed: bool, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    damage = float(level * config.damage_per_level + config.damage_base)
    if not armed:
        damage *= config.unarmed_damage_factor
    return damage


def estimate_damage(unit: UnitView, config: TacticalConfig = DEFAULT_CONFIG) -> float:
    """Coarse per-attack damage guess from the unit's level and whether it is armed."""
    return base_damage(unit.level, unit.armed, config)


class TargetScorer:
    """Ranks enemies by wound state, absolute health, proximity and kill chance."""

    def __init__(self, config: TacticalConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def score_targets(
        self,
        unit: UnitView,
        enemies: Sequence[UnitView],
        distances: Mapping[int, float],
        *,
        prefers_ranged: Optional[bool] = None,
        hittable: Optional[Mapping[int, object]] = None,
    ) -> List[TargetScore]:
        live = [enemy for enemy in enemies if enemy.hp > 0]
        if not live:
            return []
        max_distance = max([1.0] + [distances.get(enemy.entity, 0.0) for enemy in live])
        damage = estimate_damage(unit, self.config)
        scores = [
            self._score(enemy, distances.get(enemy.entity, 0.0), max_distance, damage, prefers_ranged, hittable)
            for enemy in live
        ]
        scores.sort(key=lambda score: (-score.total, score.entity))
        return scores

    def _score(
        self,
        enemy: UnitView,
        distance: float,
        max_distance: float,
        damage: float,
        prefers_ranged: Optional[bool],
        hittable: Optional[Mapping[int, object]],
    ) -> TargetScore:
        cfg = self.config
        hp_percent_score = cfg.hp_percent_weight * (100.0 - enemy.hp_percent)
        hp_absolute_score = cfg.hp_absolute_weight * min(
            cfg.hp_absolute_cap,
            cfg.hp_absolute_numerator / max(float(enemy.hp), cfg.hp_absolute_floor),
        )
        distance_score = cfg.distance_weight * (1.0 - distance / max_distance)
        killable_bonus = 0.0
        if damage * cfg.killable_now_factor >= enemy.hp:
            killable_bonus = cfg.killable_now_bonus
        elif damage * cfg.killable_soon_factor >= enemy.hp:
            killable_bonus = cfg.killable_soon_bonus
        range_adjustment = 0.0
        if prefers_ranged is True:
            if distance > C.RANGED_FAR_DISTANCE:
                range_adjustment = C.RANGED_FAR_BONUS
            elif distance < C.RANGED_CLOSE_DISTANCE:
                range_adjustment = C.RANGED_CLOSE_PENALTY
        elif prefers_ranged is False:
            range_adjustment = max(0.0, (C.MELEE_CLOSE_HORIZON - distance) * C.MELEE_CLOSE_WEIGHT)
        is_hittable = True
        penalty = 0.0
        if hittable is not None and not hittable.get(enemy.entity):
            is_hittable = False
            penalty = cfg.not_hittable_penalty
        return TargetScore(
            entity=enemy.entity,
            distance=distance,
            hp_percent_score=hp_percent_score,
            hp_absolute_score=hp_absolute_score,
            distance_score=distance_score,
            killable_bonus=killable_bonus,
            range_adjustment=range_adjustment,
            hittable=is_hittable,
            hittable_penalty=penalty,
        )

    def select(
        self,
        scores: Sequence[TargetScore],
        modes: Sequence[SelectionMode] = (SelectionMode.PREFER_KILLABLE, SelectionMode.DEFAULT),
    ) -> Optional[TargetScore]:
        """Pick a target trying each mode in order; None when nothing is scoreable."""
        if not scores:
            return None
        pool = [score for score in scores if score.hittable] or list(scores)
        for mode in modes:
            picked = self._select_mode(pool, mode)
            if picked is not None:
                logger.debug("Target %s chosen by %s", picked.entity, mode.value)
                return picked
        return self._select_mode(pool, SelectionMode.DEFAULT)

    def _select_mode(self, scores: Sequence[TargetScore], mode: SelectionMode) -> Optional[TargetScore]:
        if mode is SelectionMode.PREFER_KILLABLE:
            killable = [score for score in scores if score.killable]
            if not killable:
                return None
            return min(killable, key=lambda score: (-score.total, score.entity))
        if mode is SelectionMode.PREFER_CLOSE:
            return min(scores, key=lambda score: (-score.proximity_score, score.entity))
        return min(scores, key=lambda score: (-score.total, score.entity))
