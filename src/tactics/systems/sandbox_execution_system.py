from __future__ import annotations

import logging
import math
from typing import List, Optional

from esper import World

from tactics import constants as C
from tactics.ai.aoe import is_area_ability, pattern_covers
from tactics.ai.classifier import AbilityClassifier
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.decisions import ActionDecision, Move, UseAbility
from tactics.ai.target_scorer import base_damage
from tactics.ai.timing import BUFF_CATEGORIES, HEAL_CATEGORIES, SELF_USE_CATEGORIES, TimingCategory
from tactics.components.ability import Ability
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.action_points import ActionPoints
from tactics.components.combatant import Combatant
from tactics.components.grid_position import GridPosition
from tactics.components.health import Health
from tactics.components.loadout import Loadout
from tactics.components.status_effects import StatusEffects
from tactics.events.bus import (
    EventBus,
    EVENT_HEALTH_DAMAGE,
    EVENT_HEALTH_HEAL,
    EVENT_UNIT_TURN_STARTED,
)
from tactics.utils.combatants import is_live_combatant, list_live_combatants

logger = logging.getLogger(__name__)

T = TimingCategory


class SandboxExecutionSystem:
    """Minimal host that carries out decisions against the world.

    Damage uses the same coarse level-based estimate the planner assumes,
    healing restores a fixed share of max health and buffs are recorded as
    statuses named after the ability. Good enough for demos and tests, not a
    combat model.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        classifier: Optional[AbilityClassifier] = None,
        config: TacticalConfig = DEFAULT_CONFIG,
        heal_fraction: float = C.SANDBOX_HEAL_FRACTION,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.classifier = classifier or AbilityClassifier(config=config)
        self.config = config
        self.heal_fraction = heal_fraction
        event_bus.subscribe(EVENT_UNIT_TURN_STARTED, self.on_unit_turn_started)

    def on_unit_turn_started(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        if unit_entity is None:
            return
        try:
            self.world.component_for_entity(unit_entity, ActionPoints).refill()
        except KeyError:
            pass

    def execute(self, unit_entity: int, decision: ActionDecision) -> bool:
        """Apply ``decision``; False when the world cannot carry it out."""
        if not is_live_combatant(self.world, unit_entity):
            return False
        if isinstance(decision, UseAbility):
            return self._use_ability(unit_entity, decision)
        if isinstance(decision, Move):
            return self._move(unit_entity, decision)
        return True

    # --- Abilities ------------------------------------------------------
    def _use_ability(self, unit_entity: int, decision: UseAbility) -> bool:
        try:
            ability = self.world.component_for_entity(decision.ability_entity, Ability)
            points = self.world.component_for_entity(unit_entity, ActionPoints)
        except KeyError:
            return False
        if not points.can_spend(ability.ap_cost):
            logger.debug("Unit %s cannot afford %s", unit_entity, ability.ability_id)
            return False
        ammo = self._ammo(decision.ability_entity)
        if ammo is not None and not ammo.can_fire():
            return False
        target = decision.target_entity if decision.target_entity is not None else unit_entity
        if target != unit_entity and not is_live_combatant(self.world, target):
            return False

        points.spend(ability.ap_cost)
        if ammo is not None:
            ammo.current -= ammo.per_use
        category = self.classifier.classify(ability.ability_id, ability)
        if category is T.RELOAD:
            self._reload(unit_entity)
        elif category in HEAL_CATEGORIES:
            self._heal(unit_entity, target, ability)
        elif category in BUFF_CATEGORIES or (category is T.TURN_ENDING and target == unit_entity):
            self._add_status(unit_entity, ability.ability_id)
            if category is T.TURN_ENDING:
                points.current = 0.0
                points.movement = 0.0
        elif category in SELF_USE_CATEGORIES and target == unit_entity:
            self._add_status(unit_entity, ability.ability_id)
        else:
            self._strike(unit_entity, target, ability, category)
        return True

    def _strike(self, unit_entity: int, target: int, ability: Ability, category: TimingCategory) -> None:
        combatant = self.world.component_for_entity(unit_entity, Combatant)
        amount = int(round(base_damage(combatant.level, combatant.armed, self.config)))
        if category in (T.DEBUFF, T.TAUNT):
            self._add_status(target, ability.ability_id)
            return
        for victim in self._victims(unit_entity, target, ability):
            self.event_bus.emit(
                EVENT_HEALTH_DAMAGE,
                source_entity=unit_entity,
                target_entity=victim,
                amount=amount,
                reason=ability.ability_id,
            )
        if category is T.SELF_DAMAGE:
            health = self.world.component_for_entity(unit_entity, Health)
            self.event_bus.emit(
                EVENT_HEALTH_DAMAGE,
                source_entity=unit_entity,
                target_entity=unit_entity,
                amount=max(1, health.max_hp // 10),
                reason=f"{ability.ability_id}_cost",
            )

    def _victims(self, unit_entity: int, target: int, ability: Ability) -> List[int]:
        if not is_area_ability(ability) or ability.pattern is None:
            return [target]
        try:
            caster = self.world.component_for_entity(unit_entity, GridPosition).as_tuple()
            center = self.world.component_for_entity(target, GridPosition).as_tuple()
        except KeyError:
            return [target]
        victims = [target]
        for other, _ in list_live_combatants(self.world):
            if other in (target, unit_entity):
                continue
            try:
                pos = self.world.component_for_entity(other, GridPosition).as_tuple()
            except KeyError:
                continue
            if pattern_covers(ability.pattern, caster, center, pos):
                victims.append(other)
        return victims

    def _heal(self, unit_entity: int, target: int, ability: Ability) -> None:
        try:
            health = self.world.component_for_entity(target, Health)
        except KeyError:
            return
        self.event_bus.emit(
            EVENT_HEALTH_HEAL,
            source_entity=unit_entity,
            target_entity=target,
            amount=max(1, int(health.max_hp * self.heal_fraction)),
            reason=ability.ability_id,
        )

    def _reload(self, unit_entity: int) -> None:
        try:
            loadout = self.world.component_for_entity(unit_entity, Loadout)
        except KeyError:
            return
        for ability_entity in loadout.ability_entities:
            ammo = self._ammo(ability_entity)
            if ammo is not None:
                ammo.current = ammo.maximum

    def _add_status(self, entity: int, slug: str) -> None:
        try:
            statuses = self.world.component_for_entity(entity, StatusEffects)
        except KeyError:
            statuses = StatusEffects()
            self.world.add_component(entity, statuses)
        statuses.active.add(slug)

    def _ammo(self, ability_entity: int) -> Optional[AbilityAmmo]:
        try:
            return self.world.component_for_entity(ability_entity, AbilityAmmo)
        except KeyError:
            return None

    # --- Movement -------------------------------------------------------
    def _move(self, unit_entity: int, decision: Move) -> bool:
        if decision.destination is None:
            return False
        try:
            position = self.world.component_for_entity(unit_entity, GridPosition)
            points = self.world.component_for_entity(unit_entity, ActionPoints)
        except KeyError:
            return False
        dx = decision.destination[0] - position.x
        dy = decision.destination[1] - position.y
        cost = math.hypot(dx, dy)
        if cost > points.movement + 1e-9:
            logger.debug("Unit %s cannot move %.1f with %.1f movement", unit_entity, cost, points.movement)
            return False
        if self._occupied(unit_entity, decision.destination):
            return False
        position.x, position.y = decision.destination
        points.movement = max(0.0, points.movement - cost)
        return True

    def _occupied(self, unit_entity: int, destination) -> bool:
        for other, _ in list_live_combatants(self.world):
            if other == unit_entity:
                continue
            try:
                pos = self.world.component_for_entity(other, GridPosition)
            except KeyError:
                continue
            if (pos.x, pos.y) == tuple(destination):
                return True
        return False
