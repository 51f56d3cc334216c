"""Headless skirmish driven by the tactical decision engine.

Sets up the ECS world, event bus and systems, then lets every unit on both
sides take its turns through the orchestrator until one side is wiped out.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from esper import World

from tactics.ai.geometry import GridGeometry
from tactics.components.combatant import Faction
from tactics.components.tactical_agent import Role
from tactics.events.bus import EVENT_DECISION_MADE, EVENT_TICK, EventBus
from tactics.factories.units import create_unit
from tactics.utils.combatants import list_live_combatants
from tactics.world import create_runtime, create_world

logger = logging.getLogger("skirmish")

GRID_SIZE = 16
SECONDS_PER_TURN = 1.0


def spawn_squads(world: World) -> Dict[Faction, List[int]]:
    players = [
        create_unit(
            world, "Sergeant Vale", Faction.PLAYER, (2, 7),
            hp=120, level=3, movement=4, role=Role.TANK,
            ability_names=("sword_strike", "charge", "taunt", "defensive_stance"),
        ),
        create_unit(
            world, "Marksman Ilse", Faction.PLAYER, (1, 9),
            hp=80, level=2, movement=4, role=Role.DPS,
            ability_names=("single_shot", "concentrated_fire", "reload", "frag_grenade"),
        ),
        create_unit(
            world, "Medic Oren", Faction.ALLY, (1, 5),
            hp=70, level=2, movement=4, role=Role.SUPPORT,
            ability_names=("single_shot", "medikit", "emergency_stimm"),
        ),
    ]
    enemies = [
        create_unit(
            world, "Cultist Brute", Faction.ENEMY, (12, 7),
            hp=110, level=3, movement=4, role=Role.BALANCED,
            ability_names=("sword_strike", "blood_oath", "dispatch"),
        ),
        create_unit(
            world, "Cultist Seer", Faction.ENEMY, (14, 8),
            hp=70, level=2, movement=3, role=Role.DPS,
            ability_names=("lidless_stare", "single_shot", "reload"),
        ),
    ]
    return {Faction.PLAYER: players, Faction.ENEMY: enemies}


def surviving_side(world: World) -> Optional[Faction]:
    enemies_alive = any(c.faction is Faction.ENEMY for _, c in list_live_combatants(world))
    friends_alive = any(c.faction is not Faction.ENEMY for _, c in list_live_combatants(world))
    if enemies_alive and friends_alive:
        return None
    return Faction.ENEMY if enemies_alive else Faction.PLAYER


def run_skirmish(max_rounds: int = 12) -> Optional[Faction]:
    event_bus = EventBus()
    world = create_world(event_bus)
    runtime = create_runtime(
        world,
        event_bus,
        geometry=GridGeometry(width=GRID_SIZE, height=GRID_SIZE),
        sandbox=True,
    )
    orchestrator = runtime.orchestrator
    sandbox = runtime.sandbox
    if sandbox is None:
        raise RuntimeError("skirmish needs the sandbox host")

    def log_decision(sender, **payload) -> None:
        decision = payload["decision"]
        logger.debug("decision_made %s -> %s", payload["unit_entity"], decision)

    event_bus.subscribe(EVENT_DECISION_MADE, log_decision)

    squads = spawn_squads(world)
    order = sorted(squads[Faction.PLAYER] + squads[Faction.ENEMY])
    orchestrator.on_combat_start()
    winner: Optional[Faction] = None
    for round_number in range(1, max_rounds + 1):
        if round_number > 1:
            orchestrator.on_round_advance(round_number)
        logger.info("=== Round %d ===", round_number)
        for unit in order:
            if not any(entity == unit for entity, _ in list_live_combatants(world)):
                continue
            taken = orchestrator.run_turn(unit, sandbox.execute)
            event_bus.emit(EVENT_TICK, dt=SECONDS_PER_TURN)
            logger.info("Unit %s took %d steps", unit, len(taken))
            winner = surviving_side(world)
            if winner is not None:
                break
        if winner is not None:
            break
    orchestrator.on_combat_end(reason="victory" if winner is not None else "round limit")
    logger.info("Skirmish over: %s", winner.value if winner is not None else "draw")
    return winner


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_skirmish()


if __name__ == "__main__":
    main()
