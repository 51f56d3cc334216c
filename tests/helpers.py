from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from esper import World

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.geometry import GridGeometry
from tactics.components.ability import Ability
from tactics.components.combatant import Faction
from tactics.components.loadout import Loadout
from tactics.components.tactical_agent import Role
from tactics.events.bus import EventBus
from tactics.factories.units import create_unit
from tactics.world import TacticsRuntime, create_runtime, create_world


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_engine(
    config: TacticalConfig = DEFAULT_CONFIG,
    *,
    sandbox: bool = False,
    fallback=None,
) -> Tuple[World, EventBus, TacticsRuntime]:
    """Fresh world, bus and runtime with combat already started."""
    bus = EventBus()
    world = create_world(bus)
    runtime = create_runtime(
        world,
        bus,
        geometry=GridGeometry(melee_reach=config.melee_reach),
        config=config,
        fallback=fallback,
        sandbox=sandbox,
    )
    runtime.orchestrator.clock = FakeClock()
    runtime.orchestrator.on_combat_start()
    return world, bus, runtime


def make_unit(
    world: World,
    name: str,
    faction: Faction,
    position: Tuple[float, float],
    ability_names: Sequence[str] = (),
    *,
    role: Optional[Role] = Role.BALANCED,
    **kwargs,
) -> int:
    return create_unit(world, name, faction, position, ability_names=ability_names, role=role, **kwargs)


def ability_ids(world: World, unit: int) -> Dict[str, int]:
    """Map ability id to ability entity for a unit's loadout."""
    entities = world.component_for_entity(unit, Loadout).ability_entities
    return {world.component_for_entity(entity, Ability).ability_id: entity for entity in entities}
