from tactics.components.ability_cooldown import AbilityCooldown
from tactics.components.combatant import Faction
from tactics.components.health import Health
from tactics.components.loadout import Loadout
from tactics.events.bus import (
    EventBus,
    EVENT_ACTION_COMMITTED,
    EVENT_COMBAT_ENDED,
    EVENT_COMBAT_STARTED,
    EVENT_HEALTH_CHANGED,
    EVENT_HEALTH_DAMAGE,
    EVENT_HEALTH_HEAL,
    EVENT_ROUND_ADVANCED,
    EVENT_TICK,
    EVENT_UNIT_DIED,
)
from tactics.systems.ability_cooldown_system import AbilityCooldownSystem
from tactics.systems.combat_state_system import CombatStateSystem
from tactics.systems.health_system import HealthSystem
from tactics.utils.combat_state import find_combat_state
from tactics.world import create_world
from tests.helpers import make_unit


def record(bus, name):
    seen = []
    bus.subscribe(name, lambda sender, **payload: seen.append(payload))
    return seen


def test_cooldown_starts_on_commit_and_ticks_per_round():
    bus = EventBus()
    world = create_world(bus)
    AbilityCooldownSystem(world, bus)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("dispatch", "sword_strike"))
    dispatch, sword = world.component_for_entity(unit, Loadout).ability_entities

    bus.emit(EVENT_ACTION_COMMITTED, unit_entity=unit, ability_entity=dispatch, ability_id="dispatch")
    bus.emit(EVENT_ACTION_COMMITTED, unit_entity=unit, ability_entity=sword, ability_id="sword_strike")
    cooldown = world.component_for_entity(dispatch, AbilityCooldown)
    assert cooldown.remaining_turns == 2
    assert not world.has_component(sword, AbilityCooldown)

    bus.emit(EVENT_ROUND_ADVANCED, round=2)
    assert cooldown.remaining_turns == 1
    bus.emit(EVENT_COMBAT_ENDED, reason="victory")
    assert cooldown.is_ready()


def test_damage_and_death_events():
    bus = EventBus()
    world = create_world(bus)
    HealthSystem(world, bus)
    changes = record(bus, EVENT_HEALTH_CHANGED)
    deaths = record(bus, EVENT_UNIT_DIED)
    unit = make_unit(world, "Brute", Faction.ENEMY, (0, 0), hp=30)

    bus.emit(EVENT_HEALTH_DAMAGE, target_entity=unit, amount=18, reason="sword_strike")
    assert world.component_for_entity(unit, Health).current == 12
    assert changes[-1]["delta"] == -18

    bus.emit(EVENT_HEALTH_DAMAGE, target_entity=unit, amount=18)
    bus.emit(EVENT_HEALTH_DAMAGE, target_entity=unit, amount=18)
    assert world.component_for_entity(unit, Health).current == 0
    assert deaths == [{"unit_entity": unit}]


def test_heal_is_capped_and_skips_the_dead():
    bus = EventBus()
    world = create_world(bus)
    HealthSystem(world, bus)
    wounded = make_unit(world, "Vale", Faction.PLAYER, (0, 0), hp=90, max_hp=100)
    dead = make_unit(world, "Ilse", Faction.PLAYER, (1, 0), hp=0, max_hp=100)

    bus.emit(EVENT_HEALTH_HEAL, target_entity=wounded, amount=25)
    bus.emit(EVENT_HEALTH_HEAL, target_entity=dead, amount=25)

    assert world.component_for_entity(wounded, Health).current == 100
    assert world.component_for_entity(dead, Health).current == 0


def test_combat_state_changes_become_events():
    bus = EventBus()
    world = create_world(bus)
    CombatStateSystem(world, bus)
    started = record(bus, EVENT_COMBAT_STARTED)
    ended = record(bus, EVENT_COMBAT_ENDED)
    state = find_combat_state(world)

    state.active = True
    bus.emit(EVENT_TICK, dt=1.0)
    bus.emit(EVENT_TICK, dt=1.0)
    assert len(started) == 1

    state.active = False
    bus.emit(EVENT_TICK, dt=1.0)
    assert ended == [{"reason": "inactive"}]


def test_direct_health_writes_report_one_death():
    bus = EventBus()
    world = create_world(bus)
    CombatStateSystem(world, bus)
    deaths = record(bus, EVENT_UNIT_DIED)
    unit = make_unit(world, "Brute", Faction.ENEMY, (0, 0))
    bus.emit(EVENT_COMBAT_STARTED)

    world.component_for_entity(unit, Health).current = 0
    bus.emit(EVENT_TICK, dt=1.0)
    bus.emit(EVENT_TICK, dt=1.0)

    assert deaths == [{"unit_entity": unit}]
