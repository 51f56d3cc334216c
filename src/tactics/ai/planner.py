"""Action-point economy planning.

The planner decides the unit's posture for the rest of its turn: recover,
fall back, close distance, buff first or attack straight away. It does not
pick the concrete ability/target pair unless the posture implies one; the
orchestrator turns the plan into a single decision.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.snapshot import AbilityView, BattleSnapshot, UnitView
from tactics.ai.target_scorer import TargetScorer, estimate_damage, selection_modes
from tactics.ai.timing import TimingCategory
from tactics.components.tactical_agent import Role

logger = logging.getLogger(__name__)


class TurnPriority(Enum):
    EMERGENCY = "emergency"
    RETREAT = "retreat"
    SEEK_COVER = "seek_cover"
    BUFFED_ATTACK = "buffed_attack"
    DIRECT_ATTACK = "direct_attack"
    MOVE_AND_ATTACK = "move_and_attack"
    BUFF_MOVE_ATTACK = "buff_move_attack"
    SUPPORT = "support"
    END_TURN = "end_turn"


@dataclass(frozen=True, slots=True)
class ApEconomy:
    action_points: float
    attack_cost: float
    buff_cost: float
    attacks_without_buff: int
    attacks_with_buff: int


def ap_economy(action_points: float, attack_cost: float, buff_cost: float = 0.0) -> ApEconomy:
    if attack_cost <= 0:
        # Free attacks are bounded by the turn, not by AP; count them once.
        without = 1
        with_buff = 1 if action_points - buff_cost >= 0 else 0
    else:
        without = int(math.floor(action_points / attack_cost + 1e-9))
        remaining = action_points - buff_cost
        with_buff = int(math.floor(remaining / attack_cost + 1e-9)) if remaining > 0 else 0
    return ApEconomy(
        action_points=action_points,
        attack_cost=attack_cost,
        buff_cost=buff_cost,
        attacks_without_buff=without,
        attacks_with_buff=with_buff,
    )


@dataclass(slots=True)
class TurnPlan:
    priority: TurnPriority
    reason: str
    score: float = 0.0
    should_buff_first: bool = False
    should_move_first: bool = False
    should_retreat: bool = False
    should_seek_cover: bool = False
    recommended_buff: Optional[AbilityView] = None
    recommended_attack: Optional[AbilityView] = None
    recommended_heal: Optional[AbilityView] = None
    recommended_target: Optional[int] = None
    economy: Optional[ApEconomy] = None


class TurnPlanner:
    def __init__(
        self,
        config: TacticalConfig = DEFAULT_CONFIG,
        scorer: Optional[TargetScorer] = None,
    ) -> None:
        self.config = config
        self.scorer = scorer or TargetScorer(config)

    def plan(self, snapshot: BattleSnapshot, can_move: bool) -> TurnPlan:
        try:
            plan = self._plan(snapshot, can_move)
        except Exception:
            logger.exception("Turn planning failed for unit %s", snapshot.unit.entity)
            return TurnPlan(priority=TurnPriority.DIRECT_ATTACK, reason="error fallback")
        logger.debug("Plan for %s: %s (%s)", snapshot.unit.name, plan.priority.value, plan.reason)
        return plan

    def _plan(self, snapshot: BattleSnapshot, can_move: bool) -> TurnPlan:
        cfg = self.config
        unit = snapshot.unit
        hp = unit.hp_percent

        if hp < cfg.emergency_hp_percent:
            heal = self.select_self_heal(snapshot.abilities)
            return TurnPlan(
                priority=TurnPriority.EMERGENCY,
                reason=f"emergency: health {hp:.0f}% below {cfg.emergency_hp_percent:.0f}%",
                score=100.0,
                recommended_heal=heal,
                should_retreat=heal is None and snapshot.prefers_ranged and can_move,
            )

        support = self._support_plan(snapshot)
        if support is not None:
            return support

        nearest = snapshot.nearest_enemy
        if (
            snapshot.prefers_ranged
            and nearest is not None
            and snapshot.distance_to(nearest.entity) <= cfg.retreat_danger_radius
            and can_move
        ):
            return TurnPlan(
                priority=TurnPriority.RETREAT,
                reason=(
                    f"retreat: {nearest.name} at {snapshot.distance_to(nearest.entity):.1f}"
                    f" inside {cfg.retreat_danger_radius:.1f}"
                ),
                score=80.0,
                should_retreat=True,
                should_move_first=True,
            )

        attacks = snapshot.attack_abilities
        if not attacks:
            return TurnPlan(priority=TurnPriority.END_TURN, reason="no usable attack")

        buff = self.select_best_buff(snapshot.abilities)
        hittable = self._hittable_by_attacks(snapshot, attacks)
        if not hittable:
            return self._reposition_plan(snapshot, attacks, buff, can_move)

        primary = self.select_primary_attack(snapshot, attacks)
        target = self._pick_target(snapshot, hittable, primary)
        economy = ap_economy(snapshot.action_points, primary.cost, buff.cost if buff else 0.0)
        can_kill = self._single_enemy_killable(snapshot, economy)
        if buff is not None and self.should_buff_before_attack(economy, buff, can_kill):
            return TurnPlan(
                priority=TurnPriority.BUFFED_ATTACK,
                reason=self._buff_reason(buff, economy),
                score=60.0,
                should_buff_first=True,
                recommended_buff=buff,
                recommended_attack=primary,
                recommended_target=target,
                economy=economy,
            )
        return TurnPlan(
            priority=TurnPriority.DIRECT_ATTACK,
            reason=self._direct_reason(buff, economy, can_kill),
            score=50.0,
            recommended_attack=primary,
            recommended_target=target,
            economy=economy,
        )

    # --- Posture helpers -------------------------------------------------
    def _support_plan(self, snapshot: BattleSnapshot) -> Optional[TurnPlan]:
        if snapshot.role is not Role.SUPPORT:
            return None
        limit = self.config.emergency_hp_percent
        wounded = sorted(
            (ally for ally in snapshot.allies if ally.hp_percent <= limit),
            key=lambda ally: (ally.hp_percent, ally.entity),
        )
        for ally in wounded:
            for view in snapshot.abilities:
                if not view.is_heal or not view.ability.can_target_ally:
                    continue
                reach = max(view.ability.range, self.config.melee_reach)
                if snapshot.distance_to(ally.entity) <= reach:
                    return TurnPlan(
                        priority=TurnPriority.SUPPORT,
                        reason=f"support: {ally.name} at {ally.hp_percent:.0f}%",
                        score=90.0,
                        recommended_heal=view,
                        recommended_target=ally.entity,
                    )
        return None

    def _reposition_plan(
        self,
        snapshot: BattleSnapshot,
        attacks: Sequence[AbilityView],
        buff: Optional[AbilityView],
        can_move: bool,
    ) -> TurnPlan:
        cfg = self.config
        if not can_move:
            return TurnPlan(priority=TurnPriority.END_TURN, reason="no enemy in reach and cannot move")
        scores = self.scorer.score_targets(
            snapshot.unit, snapshot.enemies, snapshot.distances, prefers_ranged=snapshot.prefers_ranged
        )
        picked = self.scorer.select(scores, selection_modes(snapshot.role, snapshot.prefers_ranged))
        target = picked.entity if picked is not None else None
        if snapshot.prefers_ranged and snapshot.unit.hp_percent < cfg.seek_cover_hp_percent:
            return TurnPlan(
                priority=TurnPriority.SEEK_COVER,
                reason=f"seek cover: wounded ({snapshot.unit.hp_percent:.0f}%) and nothing in reach",
                score=40.0,
                should_seek_cover=True,
                should_move_first=True,
                recommended_target=target,
            )
        primary = min(attacks, key=lambda view: (view.cost, view.entity))
        if buff is not None and snapshot.action_points - buff.cost - cfg.move_ap_reserve >= primary.cost:
            return TurnPlan(
                priority=TurnPriority.BUFF_MOVE_ATTACK,
                reason=(
                    f"buff, move, attack: {snapshot.action_points:g} AP covers {buff.ability_id}"
                    f" + move + {primary.ability_id}"
                ),
                score=30.0,
                should_buff_first=True,
                should_move_first=True,
                recommended_buff=buff,
                recommended_attack=primary,
                recommended_target=target,
            )
        return TurnPlan(
            priority=TurnPriority.MOVE_AND_ATTACK,
            reason="move and attack: no enemy hittable from here",
            score=30.0,
            should_move_first=True,
            recommended_attack=primary,
            recommended_target=target,
        )

    def should_buff_before_attack(
        self,
        economy: ApEconomy,
        buff: Optional[AbilityView],
        single_enemy_killable: bool,
    ) -> bool:
        if buff is None:
            return False
        if economy.attacks_with_buff <= 0:
            return False
        if single_enemy_killable:
            return False
        return economy.attacks_with_buff * self.config.buff_multiplier > economy.attacks_without_buff * 1.0

    def _single_enemy_killable(self, snapshot: BattleSnapshot, economy: ApEconomy) -> bool:
        if len(snapshot.enemies) != 1:
            return False
        enemy = snapshot.enemies[0]
        return estimate_damage(snapshot.unit, self.config) * economy.attacks_without_buff >= enemy.hp

    # --- Selection -------------------------------------------------------
    def select_best_buff(self, abilities: Sequence[AbilityView]) -> Optional[AbilityView]:
        buffs = [view for view in abilities if view.is_buff]
        if not buffs:
            return None
        return min(
            buffs,
            key=lambda view: (
                view.category is not TimingCategory.PRE_ATTACK_BUFF,
                view.cost,
                view.entity,
            ),
        )

    def select_self_heal(self, abilities: Sequence[AbilityView]) -> Optional[AbilityView]:
        heals = [view for view in abilities if view.is_heal and view.ability.can_target_self]
        if not heals:
            return None
        return min(heals, key=lambda view: (view.cost, view.entity))

    def select_primary_attack(
        self,
        snapshot: BattleSnapshot,
        attacks: Sequence[AbilityView],
    ) -> AbilityView:
        def reach_count(view: AbilityView) -> int:
            return sum(1 for entities in snapshot.hittable.values() if view.entity in entities)

        return min(attacks, key=lambda view: (-reach_count(view), view.cost, view.entity))

    def _hittable_by_attacks(
        self,
        snapshot: BattleSnapshot,
        attacks: Sequence[AbilityView],
    ) -> Tuple[UnitView, ...]:
        attack_entities = {view.entity for view in attacks}
        return tuple(
            enemy
            for enemy in snapshot.enemies
            if attack_entities.intersection(snapshot.hittable.get(enemy.entity, ()))
        )

    def _pick_target(
        self,
        snapshot: BattleSnapshot,
        hittable: Sequence[UnitView],
        primary: AbilityView,
    ) -> Optional[int]:
        scores = self.scorer.score_targets(
            snapshot.unit,
            hittable,
            snapshot.distances,
            prefers_ranged=snapshot.prefers_ranged,
            hittable={enemy.entity: snapshot.can_hit(primary.entity, enemy.entity) for enemy in hittable},
        )
        picked = self.scorer.select(scores, selection_modes(snapshot.role, snapshot.prefers_ranged))
        return picked.entity if picked is not None else None

    # --- Reasons ---------------------------------------------------------
    def _buff_reason(self, buff: AbilityView, economy: ApEconomy) -> str:
        return (
            f"buff first with {buff.ability_id}: {economy.attacks_with_buff} buffed attacks"
            f" x{self.config.buff_multiplier:g} beat {economy.attacks_without_buff} plain"
        )

    def _direct_reason(self, buff: Optional[AbilityView], economy: ApEconomy, can_kill: bool) -> str:
        if can_kill:
            return f"direct attack: lone enemy falls to {economy.attacks_without_buff} attacks"
        if buff is None:
            return f"direct attack: no buff available, {economy.attacks_without_buff} attacks"
        if economy.attacks_with_buff <= 0:
            return f"direct attack: {buff.ability_id} would leave no AP to attack"
        return (
            f"direct attack: {economy.attacks_without_buff} plain attacks beat"
            f" {economy.attacks_with_buff} buffed"
        )
