from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from esper import World

from tactics.ai.classifier import AbilityClassifier
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.geometry import BattlefieldGeometry, GridGeometry
from tactics.components.combat_state import CombatState
from tactics.components.combatant import Faction
from tactics.events.bus import EventBus
from tactics.systems.ability_cooldown_system import AbilityCooldownSystem
from tactics.systems.combat_state_system import CombatStateSystem
from tactics.systems.decision_orchestrator import DecisionOrchestrator, FallbackPolicy
from tactics.systems.health_system import HealthSystem
from tactics.systems.round_clock_system import RoundClockSystem
from tactics.systems.sandbox_execution_system import SandboxExecutionSystem
from tactics.systems.turn_state_tracker import TurnStateTracker


def create_world(
    event_bus: EventBus,
    *,
    active: bool = False,
    round_number: Optional[int] = None,
    momentum: Optional[Dict[Faction, int]] = None,
) -> World:
    """Create a world holding the shared CombatState resource."""
    world = World()
    world.create_entity(CombatState(active=active, round=round_number, momentum=dict(momentum or {})))
    return world


@dataclass(slots=True)
class TacticsRuntime:
    orchestrator: DecisionOrchestrator
    tracker: TurnStateTracker
    round_clock: RoundClockSystem
    health: HealthSystem
    combat_state: CombatStateSystem
    cooldowns: AbilityCooldownSystem
    sandbox: Optional[SandboxExecutionSystem] = None


def create_runtime(
    world: World,
    event_bus: EventBus,
    *,
    geometry: Optional[BattlefieldGeometry] = None,
    config: TacticalConfig = DEFAULT_CONFIG,
    fallback: Optional[FallbackPolicy] = None,
    sandbox: bool = False,
) -> TacticsRuntime:
    """Subscribe the lifecycle systems and build an orchestrator over them."""
    classifier = AbilityClassifier(config=config)
    round_clock = RoundClockSystem(world, event_bus, config)
    tracker = TurnStateTracker(world, event_bus, config, round_source=round_clock.current_round)
    orchestrator = DecisionOrchestrator(
        world,
        event_bus,
        geometry=geometry or GridGeometry(melee_reach=config.melee_reach),
        config=config,
        classifier=classifier,
        tracker=tracker,
        round_clock=round_clock,
        fallback=fallback,
    )
    return TacticsRuntime(
        orchestrator=orchestrator,
        tracker=tracker,
        round_clock=round_clock,
        health=HealthSystem(world, event_bus),
        combat_state=CombatStateSystem(world, event_bus),
        cooldowns=AbilityCooldownSystem(world, event_bus),
        sandbox=SandboxExecutionSystem(world, event_bus, classifier, config) if sandbox else None,
    )
