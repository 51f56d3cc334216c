from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from esper import World

from tactics.ai.aoe import is_area_ability
from tactics.ai.catalog import normalize_ability_id
from tactics.ai.classifier import AbilityClassifier
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.errors import SensorUnavailable, UnknownUnitError
from tactics.ai.gates import GateContext, timing_gate
from tactics.ai.geometry import BattlefieldGeometry, Position
from tactics.ai.timing import (
    BUFF_CATEGORIES,
    HEAL_CATEGORIES,
    SELF_USE_CATEGORIES,
    AbilityRule,
    TimingCategory,
    is_attack_category,
)
from tactics.components.ability import Ability
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.ability_cooldown import AbilityCooldown
from tactics.components.action_points import ActionPoints
from tactics.components.combatant import Combatant, Faction
from tactics.components.grid_position import GridPosition
from tactics.components.health import Health
from tactics.components.loadout import Loadout
from tactics.components.status_effects import StatusEffects
from tactics.components.tactical_agent import Role, TacticalAgent
from tactics.components.turn_state import TurnState
from tactics.utils.combat_state import find_combat_state
from tactics.utils.combatants import list_live_combatants

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UnitView:
    entity: int
    name: str
    faction: Faction
    hp: int
    max_hp: int
    position: Position
    level: int = 1
    armed: bool = True
    statuses: FrozenSet[str] = frozenset()

    @property
    def hp_percent(self) -> float:
        if self.max_hp <= 0:
            return 100.0
        return max(0, self.hp) * 100.0 / self.max_hp


@dataclass(frozen=True, slots=True)
class AbilityView:
    entity: int
    ability: Ability
    rule: AbilityRule
    is_area: bool
    hp_cost: bool

    @property
    def ability_id(self) -> str:
        return self.ability.ability_id

    @property
    def category(self) -> TimingCategory:
        return self.rule.category

    @property
    def cost(self) -> float:
        return self.ability.ap_cost

    @property
    def is_attack(self) -> bool:
        return self.ability.can_target_enemy and is_attack_category(self.rule.category)

    @property
    def is_buff(self) -> bool:
        return self.rule.category in BUFF_CATEGORIES and self.ability.can_target_self

    @property
    def is_heal(self) -> bool:
        return self.rule.category in HEAL_CATEGORIES


@dataclass(slots=True)
class BattleSnapshot:
    """Read-only view of the battlefield for one decision call."""

    unit: UnitView
    action_points: float
    movement: float
    role: Role
    prefers_ranged: bool
    avoid_friendly_fire: bool
    round: int
    momentum: int
    first_action_done: bool
    enemies: Tuple[UnitView, ...]
    allies: Tuple[UnitView, ...]
    distances: Mapping[int, float]
    hittable: Mapping[int, Tuple[int, ...]]
    abilities: Tuple[AbilityView, ...]
    withheld: Mapping[int, str] = field(default_factory=dict)

    @property
    def hittable_enemies(self) -> Tuple[UnitView, ...]:
        return tuple(enemy for enemy in self.enemies if self.hittable.get(enemy.entity))

    @property
    def nearest_enemy(self) -> Optional[UnitView]:
        return self.enemies[0] if self.enemies else None

    @property
    def attack_abilities(self) -> Tuple[AbilityView, ...]:
        return tuple(view for view in self.abilities if view.is_attack)

    def ability(self, entity: int) -> Optional[AbilityView]:
        for view in self.abilities:
            if view.entity == entity:
                return view
        return None

    def can_hit(self, ability_entity: int, target_entity: int) -> bool:
        return ability_entity in self.hittable.get(target_entity, ())

    def distance_to(self, entity: int) -> float:
        return self.distances.get(entity, float("inf"))


class SnapshotBuilder:
    """Assembles a :class:`BattleSnapshot` from the host world."""

    def __init__(
        self,
        world: World,
        geometry: BattlefieldGeometry,
        classifier: AbilityClassifier,
        config: TacticalConfig = DEFAULT_CONFIG,
    ) -> None:
        self.world = world
        self.geometry = geometry
        self.classifier = classifier
        self.config = config

    def build(self, unit_entity: int, turn_state: TurnState, round_number: int) -> BattleSnapshot:
        unit = self.unit_view(unit_entity)
        action_points = self._read_action_points(unit_entity)
        agent = self._read_agent(unit_entity)
        enemies: List[UnitView] = []
        allies: List[UnitView] = []
        for other, combatant in list_live_combatants(self.world):
            if other == unit_entity:
                continue
            try:
                view = self.unit_view(other)
            except SensorUnavailable as exc:
                logger.debug("Skipping %s: %s", other, exc)
                continue
            if unit.faction.is_hostile_to(combatant.faction):
                enemies.append(view)
            elif unit.faction.is_friendly_to(combatant.faction):
                allies.append(view)
        distances: Dict[int, float] = {
            view.entity: self.geometry.distance(unit.position, view.position)
            for view in enemies + allies
        }
        enemies.sort(key=lambda view: (distances[view.entity], view.entity))
        allies.sort(key=lambda view: (distances[view.entity], view.entity))

        momentum = self._momentum_for(unit.faction)
        loadout = self._loadout(unit_entity)
        gate_ctx = GateContext(
            hp_percent=unit.hp_percent,
            first_action_done=turn_state.first_action_done,
            enemy_hp_percents=tuple(view.hp_percent for view in enemies),
            ally_hp_percents=tuple(view.hp_percent for view in allies),
            momentum=momentum,
            weapon_needs_reload=self._needs_reload(loadout),
            config=self.config,
        )
        available: List[AbilityView] = []
        withheld: Dict[int, str] = {}
        for ability_entity in loadout:
            try:
                ability = self.world.component_for_entity(ability_entity, Ability)
            except KeyError:
                logger.debug("Loadout entry %s has no Ability component", ability_entity)
                continue
            rule = self.classifier.rule_for(ability.ability_id, ability)
            reason = self._withhold_reason(
                ability_entity, ability, rule, action_points.current, turn_state, unit, gate_ctx
            )
            if reason is not None:
                withheld[ability_entity] = reason
                logger.debug("Withholding %s: %s", ability.ability_id, reason)
                continue
            available.append(
                AbilityView(
                    entity=ability_entity,
                    ability=ability,
                    rule=rule,
                    is_area=is_area_ability(ability),
                    hp_cost=self.classifier.is_hp_cost(ability),
                )
            )

        hittable = self._hittable(unit, enemies, available)
        prefers_ranged = agent.prefers_ranged
        if prefers_ranged is None:
            prefers_ranged = self._infer_ranged(loadout)
        return BattleSnapshot(
            unit=unit,
            action_points=action_points.current,
            movement=action_points.movement,
            role=agent.role,
            prefers_ranged=prefers_ranged,
            avoid_friendly_fire=agent.avoid_friendly_fire,
            round=round_number,
            momentum=momentum,
            first_action_done=turn_state.first_action_done,
            enemies=tuple(enemies),
            allies=tuple(allies),
            distances=distances,
            hittable=hittable,
            abilities=tuple(available),
            withheld=withheld,
        )

    # --- Sensors ---------------------------------------------------------
    def unit_view(self, entity: int) -> UnitView:
        try:
            combatant = self.world.component_for_entity(entity, Combatant)
        except KeyError as exc:
            raise UnknownUnitError(entity) from exc
        try:
            position = self.world.component_for_entity(entity, GridPosition)
        except KeyError as exc:
            raise SensorUnavailable(entity, "position") from exc
        health = self._read_health(entity)
        statuses: FrozenSet[str] = frozenset()
        try:
            statuses = frozenset(self.world.component_for_entity(entity, StatusEffects).active)
        except KeyError:
            pass
        return UnitView(
            entity=entity,
            name=combatant.name,
            faction=combatant.faction,
            hp=health.current,
            max_hp=health.max_hp,
            position=position.as_tuple(),
            level=combatant.level,
            armed=combatant.armed,
            statuses=statuses,
        )

    def _read_health(self, entity: int) -> Health:
        try:
            return self.world.component_for_entity(entity, Health)
        except KeyError:
            logger.debug("Health of %s unavailable, assuming full health", entity)
            return Health(current=100, max_hp=100)

    def _read_action_points(self, entity: int) -> ActionPoints:
        try:
            return self.world.component_for_entity(entity, ActionPoints)
        except KeyError:
            logger.debug("Action points of %s unavailable, assuming none", entity)
            return ActionPoints(current=0.0, maximum=0.0)

    def _read_agent(self, entity: int) -> TacticalAgent:
        try:
            return self.world.component_for_entity(entity, TacticalAgent)
        except KeyError:
            return TacticalAgent()

    def _loadout(self, entity: int) -> List[int]:
        try:
            return list(self.world.component_for_entity(entity, Loadout).ability_entities)
        except KeyError:
            return []

    def _momentum_for(self, faction: Faction) -> int:
        state = find_combat_state(self.world)
        if state is None:
            return self.config.momentum_start
        return int(state.momentum.get(faction, self.config.momentum_start))

    def _cooldown(self, ability_entity: int) -> int:
        try:
            return self.world.component_for_entity(ability_entity, AbilityCooldown).remaining_turns
        except KeyError:
            return 0

    def _ammo(self, ability_entity: int) -> Optional[AbilityAmmo]:
        try:
            return self.world.component_for_entity(ability_entity, AbilityAmmo)
        except KeyError:
            return None

    def _needs_reload(self, loadout: List[int]) -> bool:
        for ability_entity in loadout:
            ammo = self._ammo(ability_entity)
            if ammo is not None and ammo.is_spent():
                return True
        return False

    # --- Filtering -------------------------------------------------------
    def _withhold_reason(
        self,
        ability_entity: int,
        ability: Ability,
        rule: AbilityRule,
        ap: float,
        turn_state: TurnState,
        unit: UnitView,
        gate_ctx: GateContext,
    ) -> Optional[str]:
        if ability.ap_cost > ap:
            return f"needs {ability.ap_cost:g} AP, has {ap:g}"
        cooldown = self._cooldown(ability_entity)
        if cooldown > 0:
            return f"cooldown {cooldown}"
        ammo = self._ammo(ability_entity)
        if ammo is not None and not ammo.can_fire():
            return "out of ammo"
        if rule.single_use and normalize_ability_id(ability.ability_id) in turn_state.used_single_use:
            return "already used this combat"
        gate = timing_gate(rule, gate_ctx)
        if gate is not None:
            return gate
        if rule.category in BUFF_CATEGORIES and ability.ability_id in unit.statuses:
            return "buff already active"
        if rule.category in SELF_USE_CATEGORIES and ability.is_self_only() and ability.ability_id in unit.statuses:
            return "buff already active"
        return None

    def _hittable(
        self,
        unit: UnitView,
        enemies: List[UnitView],
        abilities: List[AbilityView],
    ) -> Dict[int, Tuple[int, ...]]:
        hittable: Dict[int, Tuple[int, ...]] = {}
        for enemy in enemies:
            reachable: List[int] = []
            for view in abilities:
                if not view.ability.can_target_enemy:
                    continue
                if self.can_target(view.ability, unit.position, enemy.position)[0]:
                    reachable.append(view.entity)
            if reachable:
                hittable[enemy.entity] = tuple(reachable)
        return hittable

    def can_target(self, ability: Ability, caster: Position, target: Position) -> Tuple[bool, str]:
        try:
            return self.geometry.can_target(ability, caster, target)
        except Exception as exc:
            logger.debug("Geometry failed for %s: %s", ability.ability_id, exc)
            return False, "geometry unavailable"

    def _infer_ranged(self, loadout: List[int]) -> bool:
        for ability_entity in loadout:
            try:
                ability = self.world.component_for_entity(ability_entity, Ability)
            except KeyError:
                continue
            if ability.can_target_enemy and ability.weapon_linked and ability.range > self.config.melee_reach:
                return True
        return False
