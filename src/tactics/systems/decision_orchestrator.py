"""Entry point of the tactical decision engine.

One call to :meth:`DecisionOrchestrator.decide_next_action` turns the current
battlefield into exactly one :data:`ActionDecision` for one unit. Nothing in
the call mutates turn state except the repeat/blacklist bookkeeping and the
dangerous-area veto; counters and single-use memory change only when the host
reports the decision as committed.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from esper import World

from tactics import constants as C
from tactics.ai.aoe import AoESafetyEvaluator
from tactics.ai.classifier import AbilityClassifier
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.decisions import (
    ActionDecision,
    EndTurn,
    Move,
    Skip,
    UseAbility,
    decision_key,
    is_passive,
)
from tactics.ai.errors import SensorUnavailable
from tactics.ai.geometry import BattlefieldGeometry, Position, Tile
from tactics.ai.planner import TurnPlan, TurnPlanner, TurnPriority
from tactics.ai.snapshot import AbilityView, BattleSnapshot, SnapshotBuilder, UnitView
from tactics.ai.target_scorer import TargetScore, TargetScorer
from tactics.ai.timing import TimingCategory
from tactics.components.ability import Ability
from tactics.components.action_points import ActionPoints
from tactics.components.loadout import Loadout
from tactics.components.tactical_agent import Role
from tactics.components.turn_state import DecisionKey, TurnState
from tactics.events.bus import (
    EventBus,
    EVENT_ACTION_COMMITTED,
    EVENT_ACTION_FAILED,
    EVENT_COMBAT_ENDED,
    EVENT_COMBAT_STARTED,
    EVENT_DANGEROUS_AOE_BLOCKED,
    EVENT_DECISION_MADE,
    EVENT_ROUND_ADVANCED,
    EVENT_UNIT_DIED,
    EVENT_UNIT_MOVED,
    EVENT_UNIT_TURN_STARTED,
)
from tactics.systems.round_clock_system import RoundClockSystem
from tactics.systems.turn_state_tracker import TurnStateTracker
from tactics.utils.combatants import is_live_combatant

logger = logging.getLogger(__name__)

T = TimingCategory

FallbackPolicy = Callable[[int], ActionDecision]
Executor = Callable[[int, ActionDecision], bool]


@dataclass(frozen=True, slots=True)
class PairScore:
    view: AbilityView
    target: UnitView
    score: float
    enemies_caught: int = 1

    @property
    def sort_key(self) -> Tuple[float, int, int]:
        return (-self.score, self.view.entity, self.target.entity)


class DecisionOrchestrator:
    """Wires snapshot, scoring, area safety and planning into one decision per call."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        geometry: BattlefieldGeometry,
        config: TacticalConfig = DEFAULT_CONFIG,
        classifier: Optional[AbilityClassifier] = None,
        tracker: Optional[TurnStateTracker] = None,
        round_clock: Optional[RoundClockSystem] = None,
        fallback: Optional[FallbackPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.geometry = geometry
        self.config = config
        self.classifier = classifier or AbilityClassifier(config=config)
        self.round_clock = round_clock or RoundClockSystem(world, event_bus, config)
        self.tracker = tracker or TurnStateTracker(world, event_bus, config)
        if self.tracker.round_source is None:
            self.tracker.round_source = self.round_clock.current_round
        self.fallback = fallback
        self.clock = clock
        self.snapshots = SnapshotBuilder(world, geometry, self.classifier, config)
        self.scorer = TargetScorer(config)
        self.aoe = AoESafetyEvaluator(config)
        self.planner = TurnPlanner(config, self.scorer)

    # --- Lifecycle hooks ------------------------------------------------
    def on_combat_start(self) -> None:
        self.event_bus.emit(EVENT_COMBAT_STARTED)

    def on_combat_end(self, reason: Optional[str] = None) -> None:
        self.event_bus.emit(EVENT_COMBAT_ENDED, reason=reason)

    def on_unit_death(self, unit_entity: int) -> None:
        self.event_bus.emit(EVENT_UNIT_DIED, unit_entity=unit_entity)

    def on_round_advance(self, round_number: Optional[int] = None) -> None:
        self.event_bus.emit(EVENT_ROUND_ADVANCED, round=round_number)

    def on_turn_start(self, unit_entity: int) -> None:
        self.event_bus.emit(EVENT_UNIT_TURN_STARTED, unit_entity=unit_entity)

    # --- Decisions ------------------------------------------------------
    def decide_next_action(self, unit_entity: int) -> ActionDecision:
        try:
            decision = self._decide(unit_entity)
        except Exception:
            logger.exception("Decision for unit %s failed; ending turn", unit_entity)
            decision = EndTurn(reason="internal error")
        logger.info("Unit %s: %s (%s)", unit_entity, decision.kind, decision.reason)
        self.event_bus.emit(EVENT_DECISION_MADE, unit_entity=unit_entity, decision=decision)
        return decision

    def commit(self, unit_entity: int, decision: ActionDecision) -> None:
        """Record that the host executed ``decision``."""
        if isinstance(decision, UseAbility):
            try:
                ability = self.world.component_for_entity(decision.ability_entity, Ability)
            except KeyError:
                logger.warning("Committed ability %s no longer exists", decision.ability_entity)
                return
            rule = self.classifier.rule_for(ability.ability_id, ability)
            self.event_bus.emit(
                EVENT_ACTION_COMMITTED,
                unit_entity=unit_entity,
                ability_entity=decision.ability_entity,
                ability_id=ability.ability_id,
                category=rule.category,
                single_use=rule.single_use,
                target_entity=decision.target_entity,
            )
        elif isinstance(decision, Move):
            self.event_bus.emit(EVENT_UNIT_MOVED, unit_entity=unit_entity, destination=decision.destination)

    def report_failure(self, unit_entity: int, decision: ActionDecision) -> None:
        """Record that the host could not execute ``decision``."""
        if is_passive(decision):
            return
        ability_entity = decision.ability_entity if isinstance(decision, UseAbility) else None
        target_entity = decision.target_entity if isinstance(decision, UseAbility) else None
        self.event_bus.emit(
            EVENT_ACTION_FAILED,
            unit_entity=unit_entity,
            ability_entity=ability_entity,
            target_entity=target_entity,
            decision_key=decision_key(decision),
        )

    def run_turn(
        self,
        unit_entity: int,
        execute: Executor,
        max_steps: Optional[int] = None,
    ) -> List[ActionDecision]:
        """Poll, execute and commit decisions until the unit's turn is over.

        The loop stops on EndTurn/Skip, when the unit has no AP or movement
        left, or after ``max_steps`` polls.
        """
        steps = max_steps if max_steps is not None else self.config.max_turn_steps
        self.on_turn_start(unit_entity)
        taken: List[ActionDecision] = []
        for _ in range(max(0, steps)):
            decision = self.decide_next_action(unit_entity)
            taken.append(decision)
            if is_passive(decision):
                break
            try:
                executed = bool(execute(unit_entity, decision))
            except Exception:
                logger.exception("Executor raised for unit %s", unit_entity)
                executed = False
            if executed:
                self.commit(unit_entity, decision)
            else:
                self.report_failure(unit_entity, decision)
            if self._exhausted(unit_entity):
                break
        else:
            logger.info("Unit %s reached the step limit of %d", unit_entity, steps)
        return taken

    # --- Pipeline -------------------------------------------------------
    def _decide(self, unit_entity: int) -> ActionDecision:
        self.tracker.observe_round(self.round_clock.current_round())
        if not is_live_combatant(self.world, unit_entity):
            return Skip(reason="unit is dead or out of combat")
        state = self.tracker.state_for(unit_entity)
        if state.consecutive_failures >= self.config.max_consecutive_failures:
            return self._delegate(unit_entity, state)
        try:
            snapshot = self.snapshots.build(unit_entity, state, self.round_clock.current_round())
        except SensorUnavailable as exc:
            logger.warning("Cannot read unit %s: %s", unit_entity, exc)
            return EndTurn(reason=f"{exc.what} unavailable")
        if not snapshot.enemies:
            return EndTurn(reason="no enemies")

        decision = self._choose(snapshot, state)
        decision = self._safety_fallback(snapshot, state, decision)
        self._track_repeat(state, decision)
        return decision

    def _choose(self, snapshot: BattleSnapshot, state: TurnState) -> ActionDecision:
        unit = snapshot.unit
        plan = self.planner.plan(snapshot, can_move=snapshot.movement > 0)

        if plan.priority is TurnPriority.EMERGENCY:
            heal = plan.recommended_heal
            if heal is not None and self._allowed(state, heal.entity, unit.entity):
                return self._use(heal, unit.entity, plan.reason)
            if plan.should_retreat:
                move = self._retreat_move(snapshot, state, plan.reason)
                if move is not None:
                    return move

        if plan.priority is TurnPriority.SUPPORT:
            heal = plan.recommended_heal
            if heal is not None and plan.recommended_target is not None:
                if self._allowed(state, heal.entity, plan.recommended_target):
                    return self._use(heal, plan.recommended_target, plan.reason)

        if plan.priority is TurnPriority.RETREAT:
            move = self._retreat_move(snapshot, state, plan.reason)
            if move is not None:
                return move

        reload = self._reload_option(snapshot, state, urgent_only=True)
        if reload is not None:
            return reload

        fury = self._self_use_option(snapshot, state, T.RIGHTEOUS_FURY, "righteous fury: using immediately")
        if fury is not None:
            return fury

        if plan.should_buff_first and plan.recommended_buff is not None:
            buff = plan.recommended_buff
            if self._allowed(state, buff.entity, unit.entity):
                return self._use(buff, unit.entity, plan.reason)

        heroic = self._self_use_option(snapshot, state, T.HEROIC_ACT, f"heroic act: momentum {snapshot.momentum}")
        if heroic is not None:
            return heroic

        if snapshot.role is Role.SUPPORT:
            hymn = self._self_use_option(
                snapshot, state, T.MOMENTUM_GENERATION, f"momentum generation: momentum {snapshot.momentum}"
            )
            if hymn is not None:
                return hymn

        if plan.should_move_first:
            if plan.should_seek_cover:
                move = self._retreat_move(snapshot, state, plan.reason)
            else:
                move = self._advance_move(snapshot, state, plan.recommended_target, plan.reason)
            if move is not None:
                return move

        pairs = self.score_pairs(snapshot, state, plan)
        if pairs:
            best = pairs[0]
            if best.score >= self.config.min_acceptable_action_score:
                return self._use(best.view, best.target.entity, self._pair_reason(best))
            logger.info(
                "Best pair %s -> %s scored %.1f, below %.1f",
                best.view.ability_id,
                best.target.name,
                best.score,
                self.config.min_acceptable_action_score,
            )

        reload = self._reload_option(snapshot, state, urgent_only=False)
        if reload is not None:
            return reload

        ender = self._turn_ending_option(snapshot, state)
        if ender is not None:
            return ender

        if plan.priority in (TurnPriority.EMERGENCY, TurnPriority.END_TURN):
            return EndTurn(reason=plan.reason)
        return EndTurn(reason="no valid action")

    # --- Pair scoring ---------------------------------------------------
    def score_pairs(
        self,
        snapshot: BattleSnapshot,
        state: TurnState,
        plan: Optional[TurnPlan] = None,
    ) -> List[PairScore]:
        """Score every usable (ability, enemy) pair, best first."""
        unit = snapshot.unit
        target_scores: Dict[int, TargetScore] = {
            score.entity: score
            for score in self.scorer.score_targets(
                unit,
                snapshot.enemies,
                snapshot.distances,
                prefers_ranged=snapshot.prefers_ranged,
                hittable={enemy.entity: bool(snapshot.hittable.get(enemy.entity)) for enemy in snapshot.enemies},
            )
        }
        planned_target = plan.recommended_target if plan is not None else None
        pairs: List[PairScore] = []
        for view in snapshot.abilities:
            if not self._is_offensive(view, snapshot):
                continue
            if view.entity in state.blocked_dangerous_aoe:
                continue
            if view.category is T.DANGEROUS_AOE and self._dangerous_anywhere(view, snapshot, state):
                continue
            for enemy in snapshot.enemies:
                if not snapshot.can_hit(view.entity, enemy.entity):
                    continue
                if not self._allowed(state, view.entity, enemy.entity):
                    continue
                target_score = target_scores.get(enemy.entity)
                if target_score is None:
                    continue
                bonus = self._category_bonus(view, enemy, snapshot)
                if bonus is None:
                    continue
                caught = 1
                if view.is_area:
                    area = self._area_bonus(view, enemy, snapshot)
                    if area is None:
                        continue
                    caught, area_bonus = area
                    bonus += area_bonus
                score = C.PAIR_BASE_SCORE + target_score.total + bonus
                if enemy.entity == planned_target:
                    score += C.PLANNED_TARGET_BONUS
                logger.debug(
                    "Pair %s -> %s: %.1f (target %.1f, bonus %.1f)",
                    view.ability_id,
                    enemy.name,
                    score,
                    target_score.total,
                    bonus,
                )
                pairs.append(PairScore(view=view, target=enemy, score=score, enemies_caught=caught))
        pairs.sort(key=lambda pair: pair.sort_key)
        return pairs

    def _is_offensive(self, view: AbilityView, snapshot: BattleSnapshot) -> bool:
        if not view.ability.can_target_enemy:
            return False
        if view.is_attack:
            return True
        if view.category is T.DEBUFF:
            return True
        return view.category is T.TAUNT and snapshot.role is Role.TANK

    def _category_bonus(
        self,
        view: AbilityView,
        enemy: UnitView,
        snapshot: BattleSnapshot,
    ) -> Optional[float]:
        """Timing bonus for using ``view`` on ``enemy``; None rules the pair out."""
        category = view.category
        if category is T.FINISHER:
            threshold = view.rule.target_hp_threshold or self.config.finisher_target_hp_percent
            if enemy.hp_percent > threshold:
                return None
            return C.FINISHER_BONUS
        if category is T.DEBUFF:
            return C.DEBUFF_BONUS if not snapshot.first_action_done else 0.0
        if category is T.HEROIC_ACT:
            return C.HEROIC_BONUS
        if category is T.DESPERATE_MEASURE:
            return C.DESPERATE_BONUS
        if category is T.TAUNT:
            return C.TAUNT_BONUS
        if category is T.GAP_CLOSER:
            others = [
                entity
                for entity in snapshot.hittable.get(enemy.entity, ())
                if entity != view.entity and self._is_plain_attack(snapshot.ability(entity))
            ]
            return C.GAP_CLOSER_PENALTY if others else C.GAP_CLOSER_BONUS
        return 0.0

    @staticmethod
    def _is_plain_attack(view: Optional[AbilityView]) -> bool:
        return view is not None and view.is_attack and view.category is not T.GAP_CLOSER

    def _dangerous_anywhere(self, view: AbilityView, snapshot: BattleSnapshot, state: TurnState) -> bool:
        """Check every enemy ``view`` could be aimed at before scoring any of them."""
        for enemy in snapshot.enemies:
            if not snapshot.can_hit(view.entity, enemy.entity):
                continue
            if self._veto_dangerous(view, enemy, snapshot, state):
                return True
        return False

    def _veto_dangerous(
        self,
        view: AbilityView,
        enemy: UnitView,
        snapshot: BattleSnapshot,
        state: TurnState,
    ) -> bool:
        allies = [ally.position for ally in snapshot.allies]
        allies_hit, hits_self = self.aoe.pattern_hits(view.ability, snapshot.unit.position, enemy.position, allies)
        if allies_hit <= 0:
            return False
        state.blocked_dangerous_aoe.add(view.entity)
        logger.info(
            "Blocked %s for unit %s: %d allies inside its area at %s",
            view.ability_id,
            snapshot.unit.entity,
            allies_hit,
            enemy.name,
        )
        self.event_bus.emit(
            EVENT_DANGEROUS_AOE_BLOCKED,
            unit_entity=snapshot.unit.entity,
            ability_entity=view.entity,
            target_entity=enemy.entity,
            allies=allies_hit,
            hits_self=hits_self,
        )
        return True

    def _area_bonus(
        self,
        view: AbilityView,
        enemy: UnitView,
        snapshot: BattleSnapshot,
    ) -> Optional[Tuple[int, float]]:
        caster = snapshot.unit.position
        center = enemy.position
        if snapshot.avoid_friendly_fire:
            allies = [ally.position for ally in snapshot.allies]
            if not self.aoe.is_safe(view.ability, caster, center, allies):
                return None
        enemies = [other.position for other in snapshot.enemies]
        caught = max(1, self.aoe.enemies_caught(view.ability, caster, center, enemies))
        if not view.ability.weapon_linked and caught < self.config.aoe_min_enemies:
            logger.debug("%s at %s catches only %d enemies", view.ability_id, enemy.name, caught)
            return None
        return caught, C.AOE_EXTRA_ENEMY_BONUS * (caught - 1)

    # --- Non-attack options ---------------------------------------------
    def _reload_option(
        self,
        snapshot: BattleSnapshot,
        state: TurnState,
        urgent_only: bool,
    ) -> Optional[UseAbility]:
        reloads = [view for view in snapshot.abilities if view.category is T.RELOAD]
        if not reloads:
            return None
        if urgent_only and not self._attack_out_of_ammo(snapshot):
            return None
        for view in sorted(reloads, key=lambda view: (view.cost, view.entity)):
            if self._allowed(state, view.entity, snapshot.unit.entity):
                reason = "reload: attack out of ammo" if urgent_only else "reload: nothing better to do"
                return self._use(view, snapshot.unit.entity, reason)
        return None

    def _attack_out_of_ammo(self, snapshot: BattleSnapshot) -> bool:
        for ability_entity, reason in snapshot.withheld.items():
            if reason != "out of ammo":
                continue
            try:
                ability = self.world.component_for_entity(ability_entity, Ability)
            except KeyError:
                continue
            if ability.can_target_enemy:
                return True
        return False

    def _self_use_option(
        self,
        snapshot: BattleSnapshot,
        state: TurnState,
        category: TimingCategory,
        reason: str,
    ) -> Optional[UseAbility]:
        """Cheapest caster-only ability of ``category`` not yet used this turn."""
        candidates = [
            view
            for view in snapshot.abilities
            if view.category is category
            and view.ability.is_self_only()
            and view.entity not in state.used_this_turn
        ]
        for view in sorted(candidates, key=lambda view: (view.cost, view.entity)):
            if self._allowed(state, view.entity, snapshot.unit.entity):
                return self._use(view, snapshot.unit.entity, f"{reason} ({view.ability_id})")
        return None

    def _turn_ending_option(self, snapshot: BattleSnapshot, state: TurnState) -> Optional[UseAbility]:
        enders = [
            view
            for view in snapshot.abilities
            if view.category is T.TURN_ENDING and view.ability.can_target_self
        ]
        for view in sorted(enders, key=lambda view: (view.cost, view.entity)):
            if self._allowed(state, view.entity, snapshot.unit.entity):
                return self._use(view, snapshot.unit.entity, f"turn ending: {view.ability_id}, no attack available")
        return None

    # --- Movement -------------------------------------------------------
    def _reachable(self, snapshot: BattleSnapshot) -> Dict[Tile, float]:
        if snapshot.movement <= 0:
            return {}
        occupied = [view.position for view in snapshot.enemies + snapshot.allies]
        try:
            return dict(self.geometry.reachable_tiles(snapshot.unit.position, snapshot.movement, occupied))
        except Exception as exc:
            logger.debug("Reachable tiles unavailable for %s: %s", snapshot.unit.entity, exc)
            return {}

    def _advance_move(
        self,
        snapshot: BattleSnapshot,
        state: TurnState,
        target_entity: Optional[int],
        reason: str,
    ) -> Optional[Move]:
        target = self._unit_in(snapshot.enemies, target_entity) or snapshot.nearest_enemy
        if target is None or not self._allowed_move(state, target.entity):
            return None
        tiles = self._reachable(snapshot)
        if not tiles:
            return None
        attacks = snapshot.attack_abilities

        def in_reach(pos: Position) -> bool:
            return any(self.snapshots.can_target(view.ability, pos, target.position)[0] for view in attacks)

        def rank(item: Tuple[Tile, float]) -> Tuple[bool, float, Tile]:
            tile, cost = item
            pos = (float(tile[0]), float(tile[1]))
            distance = self.geometry.distance(pos, target.position)
            if in_reach(pos):
                return (False, -distance if snapshot.prefers_ranged else cost, tile)
            return (True, distance, tile)

        tile, _ = min(tiles.items(), key=rank)
        destination = (float(tile[0]), float(tile[1]))
        if not in_reach(destination):
            if self.geometry.distance(destination, target.position) >= snapshot.distance_to(target.entity):
                return None
        return Move(destination=destination, reason=f"{reason} (toward {target.name})", toward_entity=target.entity)

    def _retreat_move(self, snapshot: BattleSnapshot, state: TurnState, reason: str) -> Optional[Move]:
        if not snapshot.enemies or not self._allowed_move(state, None):
            return None
        tiles = self._reachable(snapshot)
        if not tiles:
            return None
        enemy_positions = [enemy.position for enemy in snapshot.enemies]

        def clearance(pos: Position) -> float:
            return min(self.geometry.distance(pos, other) for other in enemy_positions)

        def rank(item: Tuple[Tile, float]) -> Tuple[float, float, Tile]:
            tile, cost = item
            return (-clearance((float(tile[0]), float(tile[1]))), cost, tile)

        tile, _ = min(tiles.items(), key=rank)
        destination = (float(tile[0]), float(tile[1]))
        if clearance(destination) <= clearance(snapshot.unit.position):
            return None
        return Move(destination=destination, reason=reason)

    @staticmethod
    def _unit_in(units: Sequence[UnitView], entity: Optional[int]) -> Optional[UnitView]:
        if entity is None:
            return None
        for view in units:
            if view.entity == entity:
                return view
        return None

    # --- Safety nets ----------------------------------------------------
    def _safety_fallback(
        self,
        snapshot: BattleSnapshot,
        state: TurnState,
        decision: ActionDecision,
    ) -> ActionDecision:
        """Force a plain attack when a wounded unit would otherwise idle.

        Applies only to units that hold an ability paid for with their own
        health: such units are the ones that end up with nothing but
        self-damaging options gated off while desperate.
        """
        if not is_passive(decision):
            return decision
        if snapshot.unit.hp_percent >= self.config.safety_fallback_hp_percent:
            return decision
        nearest = snapshot.nearest_enemy
        if nearest is None or not self._holds_hp_cost_ability(snapshot.unit.entity):
            return decision
        candidates = [
            view
            for view in snapshot.abilities
            if view.category is T.NORMAL
            and view.ability.can_target_enemy
            and not view.ability.can_target_ally
            and not view.hp_cost
        ]
        for view in sorted(candidates, key=lambda view: (view.cost, view.entity)):
            if not snapshot.can_hit(view.entity, nearest.entity):
                continue
            if not self._allowed(state, view.entity, nearest.entity):
                continue
            logger.info(
                "Safety fallback for unit %s: %s on %s instead of %s",
                snapshot.unit.entity,
                view.ability_id,
                nearest.name,
                decision.kind,
            )
            return self._use(
                view,
                nearest.entity,
                f"safety fallback: health {snapshot.unit.hp_percent:.0f}%, attacking nearest enemy",
            )
        return decision

    def _holds_hp_cost_ability(self, unit_entity: int) -> bool:
        try:
            loadout = self.world.component_for_entity(unit_entity, Loadout)
        except KeyError:
            return False
        for ability_entity in loadout.ability_entities:
            try:
                ability = self.world.component_for_entity(ability_entity, Ability)
            except KeyError:
                continue
            if self.classifier.is_hp_cost(ability):
                return True
        return False

    def _delegate(self, unit_entity: int, state: TurnState) -> ActionDecision:
        logger.warning(
            "Unit %s failed %d times in a row; delegating to fallback",
            unit_entity,
            state.consecutive_failures,
        )
        if self.fallback is None:
            return EndTurn(reason="too many failed actions")
        return self.fallback(unit_entity)

    def _track_repeat(self, state: TurnState, decision: ActionDecision) -> None:
        if is_passive(decision):
            return
        key = decision_key(decision)
        now = self.clock()
        if state.last_decision == key and now - state.last_decision_at <= self.config.repeat_window_seconds:
            logger.warning("Unit %s chose %s again without committing it", state.unit_entity, key)
            self.tracker.record_failure(state.unit_entity, key)
        state.last_decision = key
        state.last_decision_at = now

    def _exhausted(self, unit_entity: int) -> bool:
        try:
            points = self.world.component_for_entity(unit_entity, ActionPoints)
        except KeyError:
            return False
        return points.current <= 0 and points.movement <= 0

    # --- Helpers --------------------------------------------------------
    @staticmethod
    def _allowed(state: TurnState, ability_entity: int, target_entity: Optional[int]) -> bool:
        key: DecisionKey = ("use_ability", ability_entity, target_entity)
        return key not in state.blacklist

    @staticmethod
    def _allowed_move(state: TurnState, toward_entity: Optional[int]) -> bool:
        return ("move", toward_entity, None) not in state.blacklist

    @staticmethod
    def _use(view: AbilityView, target_entity: int, reason: str) -> UseAbility:
        return UseAbility(
            ability_entity=view.entity,
            ability_id=view.ability_id,
            target_entity=target_entity,
            reason=reason,
        )

    @staticmethod
    def _pair_reason(pair: PairScore) -> str:
        reason = f"{pair.view.category.value}: {pair.view.ability_id} on {pair.target.name} ({pair.score:.1f})"
        if pair.enemies_caught > 1:
            reason += f", catches {pair.enemies_caught} enemies"
        return reason
