from tactics.ai.decisions import EndTurn, Move, UseAbility
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.action_points import ActionPoints
from tactics.components.combatant import Faction
from tactics.components.grid_position import GridPosition
from tactics.components.health import Health
from tactics.components.status_effects import StatusEffects
from tests.helpers import ability_ids, make_engine, make_unit


def use(world, unit, ability_id, target):
    return UseAbility(
        ability_entity=ability_ids(world, unit)[ability_id],
        ability_id=ability_id,
        target_entity=target,
        reason="test",
    )


def test_run_turn_attacks_until_no_enemy_is_left():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    enemy = make_unit(world, "Brute", Faction.ENEMY, (1, 0), hp=30)

    taken = runtime.orchestrator.run_turn(unit, runtime.sandbox.execute)

    assert [decision.kind for decision in taken] == ["use_ability", "use_ability", "end_turn"]
    assert taken[-1] == EndTurn(reason="no enemies")
    assert world.component_for_entity(enemy, Health).current == 0
    assert world.component_for_entity(unit, ActionPoints).current == 1.0


def test_run_turn_stops_after_a_failure_leaves_nothing():
    world, bus, runtime = make_engine()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))

    taken = runtime.orchestrator.run_turn(unit, lambda unit_entity, decision: False)

    assert len(taken) == 2
    assert isinstance(taken[-1], EndTurn)
    assert runtime.tracker.state_for(unit).consecutive_failures == 1


def test_executor_exceptions_count_as_failures():
    world, bus, runtime = make_engine()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))

    def explode(unit_entity, decision):
        raise RuntimeError("animation glitch")

    taken = runtime.orchestrator.run_turn(unit, explode)
    assert isinstance(taken[-1], EndTurn)


def test_run_turn_respects_step_limit():
    world, bus, runtime = make_engine()
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("sword_strike",))
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))

    taken = runtime.orchestrator.run_turn(unit, lambda unit_entity, decision: True, max_steps=4)

    assert len(taken) == 4
    assert all(isinstance(decision, UseAbility) for decision in taken)


def test_moves_spend_movement_and_respect_occupancy():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), movement=3.0)
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))
    sandbox = runtime.sandbox

    assert not sandbox.execute(unit, Move(destination=(1.0, 0.0), reason="test"))
    assert sandbox.execute(unit, Move(destination=(0.0, 2.0), reason="test"))
    assert world.component_for_entity(unit, GridPosition).as_tuple() == (0.0, 2.0)
    assert world.component_for_entity(unit, ActionPoints).movement == 1.0
    assert not sandbox.execute(unit, Move(destination=(0.0, 5.0), reason="test"))


def test_abilities_need_ap_and_a_live_target():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("charge", "sword_strike"), action_points=1.0)
    corpse = make_unit(world, "Corpse", Faction.ENEMY, (1, 0), hp=0, max_hp=50)
    enemy = make_unit(world, "Brute", Faction.ENEMY, (0, 3))
    sandbox = runtime.sandbox

    assert not sandbox.execute(unit, use(world, unit, "charge", enemy))
    assert not sandbox.execute(unit, use(world, unit, "sword_strike", corpse))
    assert world.component_for_entity(unit, ActionPoints).current == 1.0


def test_heal_reload_and_buff_effects():
    world, bus, runtime = make_engine(sandbox=True)
    medic = make_unit(
        world, "Oren", Faction.ALLY, (0, 0), ("medikit", "single_shot", "reload", "concentrated_fire"),
        action_points=5.0,
    )
    ally = make_unit(world, "Vale", Faction.PLAYER, (1, 0), hp=20, max_hp=100)
    sandbox = runtime.sandbox
    ammo = world.component_for_entity(ability_ids(world, medic)["single_shot"], AbilityAmmo)
    ammo.current = 0

    assert sandbox.execute(medic, use(world, medic, "medikit", ally))
    assert world.component_for_entity(ally, Health).current == 45

    assert sandbox.execute(medic, use(world, medic, "reload", medic))
    assert ammo.current == ammo.maximum

    assert sandbox.execute(medic, use(world, medic, "concentrated_fire", medic))
    assert "concentrated_fire" in world.component_for_entity(medic, StatusEffects).active
    assert world.component_for_entity(medic, ActionPoints).current == 2.0


def test_turn_ending_ability_spends_the_rest_of_the_turn():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("veil_of_blades",), movement=4.0)
    sandbox = runtime.sandbox
    assert sandbox.execute(unit, use(world, unit, "veil_of_blades", unit))
    points = world.component_for_entity(unit, ActionPoints)
    assert points.current == 0.0 and points.movement == 0.0


def test_area_weapon_hits_everyone_in_the_pattern():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Pyro", Faction.PLAYER, (0, 0), ("flamer",))
    first = make_unit(world, "Brute", Faction.ENEMY, (3, 0))
    second = make_unit(world, "Brute2", Faction.ENEMY, (4, 0))
    bystander = make_unit(world, "Far", Faction.ENEMY, (0, 4))
    assert runtime.sandbox.execute(unit, use(world, unit, "flamer", first))
    assert world.component_for_entity(first, Health).current == 82
    assert world.component_for_entity(second, Health).current == 82
    assert world.component_for_entity(bystander, Health).current == 100


def test_self_empowering_ability_marks_the_caster():
    world, bus, runtime = make_engine(sandbox=True)
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0), ("righteous_fury", "sword_strike"), hp=100)
    make_unit(world, "Brute", Faction.ENEMY, (1, 0))

    assert runtime.sandbox.execute(unit, use(world, unit, "righteous_fury", unit))

    assert "righteous_fury" in world.component_for_entity(unit, StatusEffects).active
    assert world.component_for_entity(unit, Health).current == 100
