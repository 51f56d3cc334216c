from __future__ import annotations

from esper import World

from tactics.components.combat_state import CombatState


def get_or_create_combat_state(world: World) -> CombatState:
    """Return the shared CombatState component, creating it if absent."""
    existing = find_combat_state(world)
    if existing is not None:
        return existing
    world.create_entity(CombatState())
    return list(world.get_component(CombatState))[0][1]


def find_combat_state(world: World) -> CombatState | None:
    for _, state in world.get_component(CombatState):
        return state
    return None
