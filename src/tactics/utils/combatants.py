from __future__ import annotations

from typing import List, Tuple

from esper import World

from tactics.components.combatant import Combatant, Faction
from tactics.components.health import Health


def is_live_combatant(world: World, entity: int) -> bool:
    """True when ``entity`` is alive, still in the encounter and not neutral."""

    try:
        combatant = world.component_for_entity(entity, Combatant)
    except KeyError:
        return False
    if not combatant.in_combat or combatant.faction is Faction.NEUTRAL:
        return False
    try:
        health = world.component_for_entity(entity, Health)
    except KeyError:
        return True
    return health.is_alive()


def list_live_combatants(world: World) -> List[Tuple[int, Combatant]]:
    """Return live combatants ordered by entity id."""

    live = [
        (entity, combatant)
        for entity, combatant in world.get_component(Combatant)
        if is_live_combatant(world, entity)
    ]
    live.sort(key=lambda item: item[0])
    return live
