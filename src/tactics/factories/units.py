from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from esper import World

from tactics.components.action_points import ActionPoints
from tactics.components.combatant import Combatant, Faction
from tactics.components.grid_position import GridPosition
from tactics.components.health import Health
from tactics.components.loadout import Loadout
from tactics.components.status_effects import StatusEffects
from tactics.components.tactical_agent import Role, TacticalAgent
from tactics.factories.abilities import create_loadout


def create_unit(
    world: World,
    name: str,
    faction: Faction,
    position: Tuple[float, float],
    *,
    hp: int = 100,
    max_hp: Optional[int] = None,
    action_points: float = 3.0,
    movement: float = 0.0,
    level: int = 1,
    armed: bool = True,
    abilities: Sequence[int] = (),
    ability_names: Sequence[str] = (),
    statuses: Iterable[str] = (),
    role: Optional[Role] = None,
    prefers_ranged: Optional[bool] = None,
    avoid_friendly_fire: bool = True,
) -> int:
    """Create a combatant entity.

    Passing ``role`` marks the unit as controlled by the decision engine.
    ``abilities`` are existing ability entities; ``ability_names`` are built
    through the ability factories and appended after them.
    """
    loadout = list(abilities) + create_loadout(world, ability_names)
    components = [
        Combatant(name=name, faction=faction, level=level, armed=armed),
        Health(current=hp, max_hp=max_hp if max_hp is not None else hp),
        ActionPoints(
            current=action_points,
            maximum=action_points,
            movement=movement,
            movement_maximum=movement,
        ),
        GridPosition(x=float(position[0]), y=float(position[1])),
        Loadout(ability_entities=loadout),
        StatusEffects(active=set(statuses)),
    ]
    if role is not None:
        components.append(
            TacticalAgent(role=role, prefers_ranged=prefers_ranged, avoid_friendly_fire=avoid_friendly_fire)
        )
    return world.create_entity(*components)
