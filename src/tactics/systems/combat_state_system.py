from __future__ import annotations

import logging
from typing import Set

from esper import World

from tactics.components.combatant import Combatant
from tactics.components.health import Health
from tactics.events.bus import (
    EventBus,
    EVENT_COMBAT_ENDED,
    EVENT_COMBAT_STARTED,
    EVENT_TICK,
    EVENT_UNIT_DIED,
)
from tactics.utils.combat_state import get_or_create_combat_state

logger = logging.getLogger(__name__)


class CombatStateSystem:
    """Turns host state changes into lifecycle events.

    Hosts that only flip ``CombatState.active`` or write ``Health`` directly
    still get ``combat_started`` / ``combat_ended`` and a single ``unit_died``
    per fallen unit, detected on the next tick.
    """

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self._was_active = get_or_create_combat_state(world).active
        self._reported_dead: Set[int] = set()
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_UNIT_DIED, self.on_unit_died)
        event_bus.subscribe(EVENT_COMBAT_STARTED, self.on_combat_started)
        event_bus.subscribe(EVENT_COMBAT_ENDED, self.on_combat_ended)

    def on_tick(self, sender, **payload) -> None:
        state = get_or_create_combat_state(self.world)
        state.elapsed += max(0.0, float(payload.get("dt", 0.0)))
        if state.active != self._was_active:
            self._was_active = state.active
            if state.active:
                logger.info("Combat became active")
                self.event_bus.emit(EVENT_COMBAT_STARTED)
            else:
                logger.info("Combat became inactive")
                self.event_bus.emit(EVENT_COMBAT_ENDED, reason="inactive")
            return
        if state.active:
            self._detect_deaths()

    def on_unit_died(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        if unit_entity is not None:
            self._reported_dead.add(unit_entity)

    def on_combat_started(self, sender, **payload) -> None:
        self._reported_dead.clear()
        self._was_active = True
        state = get_or_create_combat_state(self.world)
        state.active = True
        state.elapsed = 0.0

    def on_combat_ended(self, sender, **payload) -> None:
        self._was_active = False
        get_or_create_combat_state(self.world).active = False

    def _detect_deaths(self) -> None:
        fallen = []
        for entity, (_, health) in self.world.get_components(Combatant, Health):
            if not health.is_alive() and entity not in self._reported_dead:
                fallen.append(entity)
        for entity in sorted(fallen):
            logger.info("Unit %s fell", entity)
            self.event_bus.emit(EVENT_UNIT_DIED, unit_entity=entity)
