from __future__ import annotations

from esper import World

from tactics.components.ability import Ability
from tactics.components.ability_cooldown import AbilityCooldown
from tactics.events.bus import (
    EventBus,
    EVENT_ACTION_COMMITTED,
    EVENT_COMBAT_ENDED,
    EVENT_ROUND_ADVANCED,
)


class AbilityCooldownSystem:
    """Starts cooldowns when an ability is committed and ticks them each round."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_ACTION_COMMITTED, self.on_action_committed)
        event_bus.subscribe(EVENT_ROUND_ADVANCED, self.on_round_advanced)
        event_bus.subscribe(EVENT_COMBAT_ENDED, self.on_combat_ended)

    def on_action_committed(self, sender, **payload) -> None:
        ability_entity = payload.get("ability_entity")
        if ability_entity is None:
            return
        ability = self._get_ability(ability_entity)
        if ability is None or ability.cooldown <= 0:
            return
        state = self._ensure_state(ability_entity)
        state.remaining_turns = max(0, int(ability.cooldown))

    def on_round_advanced(self, sender, **payload) -> None:
        for _, state in self.world.get_component(AbilityCooldown):
            if state.remaining_turns > 0:
                state.remaining_turns = max(0, state.remaining_turns - 1)

    def on_combat_ended(self, sender, **payload) -> None:
        for _, state in self.world.get_component(AbilityCooldown):
            state.remaining_turns = 0

    def _ensure_state(self, ability_entity: int) -> AbilityCooldown:
        try:
            return self.world.component_for_entity(ability_entity, AbilityCooldown)
        except KeyError:
            state = AbilityCooldown()
            self.world.add_component(ability_entity, state)
            return state

    def _get_ability(self, ability_entity: int) -> Ability | None:
        try:
            return self.world.component_for_entity(ability_entity, Ability)
        except KeyError:
            return None
