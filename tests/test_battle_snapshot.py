import pytest
from esper import World

from tactics.ai.classifier import AbilityClassifier
from tactics.ai.errors import SensorUnavailable
from tactics.ai.geometry import GridGeometry
from tactics.ai.snapshot import SnapshotBuilder
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.ability_cooldown import AbilityCooldown
from tactics.components.combatant import Combatant, Faction
from tactics.components.grid_position import GridPosition
from tactics.components.turn_state import TurnState
from tactics.events.bus import EventBus
from tactics.world import create_world
from tests.helpers import ability_ids, make_unit


def build(world, unit, state=None):
    builder = SnapshotBuilder(world, GridGeometry(), AbilityClassifier())
    return builder.build(unit, state or TurnState(unit_entity=unit), 1)


def test_withheld_abilities_carry_a_reason():
    world = World()
    unit = make_unit(
        world,
        "Vale",
        Faction.PLAYER,
        (0, 0),
        ("charge", "dispatch", "single_shot", "blood_oath", "run_and_gun", "concentrated_fire", "reload"),
        action_points=1.0,
        statuses=("concentrated_fire",),
    )
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))
    ids = ability_ids(world, unit)
    world.component_for_entity(ids["dispatch"], AbilityCooldown).remaining_turns = 2
    world.component_for_entity(ids["single_shot"], AbilityAmmo).current = 0
    state = TurnState(unit_entity=unit, used_single_use={"bloodoath"})

    snapshot = build(world, unit, state)

    assert snapshot.withheld[ids["charge"]] == "needs 2 AP, has 1"
    assert snapshot.withheld[ids["dispatch"]] == "cooldown 2"
    assert snapshot.withheld[ids["single_shot"]] == "out of ammo"
    assert snapshot.withheld[ids["blood_oath"]] == "already used this combat"
    assert snapshot.withheld[ids["run_and_gun"]] == "waiting for first action"
    assert snapshot.withheld[ids["concentrated_fire"]] == "buff already active"
    # A spent magazine unlocks the reload.
    assert [view.ability_id for view in snapshot.abilities] == ["reload"]


def test_enemies_exclude_dead_departed_and_neutral_units():
    world = World()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    far = make_unit(world, "Far", Faction.ENEMY, (5, 0))
    near = make_unit(world, "Near", Faction.ENEMY, (2, 0))
    make_unit(world, "Corpse", Faction.ENEMY, (1, 0), hp=0, max_hp=100)
    fled = make_unit(world, "Fled", Faction.ENEMY, (1, 1))
    world.component_for_entity(fled, Combatant).in_combat = False
    make_unit(world, "Villager", Faction.NEUTRAL, (0, 1))
    ally = make_unit(world, "Ilse", Faction.ALLY, (3, 3))

    snapshot = build(world, unit)

    assert [view.entity for view in snapshot.enemies] == [near, far]
    assert [view.entity for view in snapshot.allies] == [ally]
    assert snapshot.nearest_enemy.entity == near
    assert snapshot.distance_to(far) == 5.0


def test_hittable_lists_abilities_that_reach_each_enemy():
    world = World()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike", "single_shot"))
    near = make_unit(world, "Near", Faction.ENEMY, (1, 0))
    far = make_unit(world, "Far", Faction.ENEMY, (6, 0))
    ids = ability_ids(world, unit)

    snapshot = build(world, unit)

    assert set(snapshot.hittable[near]) == {ids["sword_strike"], ids["single_shot"]}
    assert snapshot.hittable[far] == (ids["single_shot"],)
    assert snapshot.can_hit(ids["single_shot"], far)
    assert not snapshot.can_hit(ids["sword_strike"], far)
    assert snapshot.prefers_ranged


def test_missing_health_reads_as_full_health():
    world = World()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    ghost = world.create_entity(Combatant(name="Ghost", faction=Faction.ENEMY), GridPosition(1.0, 0.0))

    snapshot = build(world, unit)

    view = snapshot.enemies[0]
    assert view.entity == ghost
    assert view.hp == 100
    assert view.hp_percent == 100.0


def test_acting_unit_without_position_is_a_sensor_fault():
    world = World()
    unit = world.create_entity(Combatant(name="Lost", faction=Faction.PLAYER))
    with pytest.raises(SensorUnavailable) as exc:
        build(world, unit)
    assert exc.value.what == "position"


def test_other_units_without_position_are_skipped():
    world = World()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    world.create_entity(Combatant(name="Nowhere", faction=Faction.ENEMY))
    assert build(world, unit).enemies == ()


def test_momentum_comes_from_combat_state():
    world = create_world(EventBus(), momentum={Faction.PLAYER: 180})
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("heroic_strike",))
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))
    snapshot = build(world, unit)
    assert snapshot.momentum == 180
    assert [view.ability_id for view in snapshot.abilities] == ["heroic_strike"]


def test_low_momentum_withholds_heroic_abilities():
    world = create_world(EventBus())
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("heroic_strike",))
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))
    snapshot = build(world, unit)
    assert snapshot.momentum == 100
    assert snapshot.abilities == ()
    assert "momentum" in next(iter(snapshot.withheld.values()))
