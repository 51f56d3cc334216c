import pytest
from esper import World

from tactics.components.ability import Ability
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.ability_cooldown import AbilityCooldown
from tactics.components.action_points import ActionPoints
from tactics.components.combatant import Combatant, Faction
from tactics.components.loadout import Loadout
from tactics.components.tactical_agent import Role, TacticalAgent
from tactics.factories.abilities import available_ability_names, create_ability_by_name
from tactics.factories.units import create_unit


def test_builders_are_discovered_from_the_kits():
    names = available_ability_names()
    for expected in ("sword_strike", "single_shot", "reload", "medikit", "blood_oath", "lidless_stare"):
        assert expected in names


def test_unknown_ability_name_is_rejected():
    with pytest.raises(ValueError):
        create_ability_by_name(World(), "laser_eyes")


def test_overrides_replace_ability_fields():
    world = World()
    entity = create_ability_by_name(world, "sword_strike", ap_cost=2.5, name="Great sword")
    ability = world.component_for_entity(entity, Ability)
    assert ability.ap_cost == 2.5
    assert ability.name == "Great sword"
    assert ability.ability_id == "sword_strike"


def test_unknown_override_field_is_rejected():
    with pytest.raises(ValueError):
        create_ability_by_name(World(), "sword_strike", damage=40)


def test_magazines_and_cooldowns_are_attached():
    world = World()
    shot = create_ability_by_name(world, "single_shot", magazine=2)
    ammo = world.component_for_entity(shot, AbilityAmmo)
    assert ammo.current == ammo.maximum == 2
    dispatch = create_ability_by_name(world, "dispatch")
    assert world.component_for_entity(dispatch, AbilityCooldown).is_ready()
    sword = create_ability_by_name(world, "sword_strike")
    assert not world.has_component(sword, AbilityAmmo)
    assert not world.has_component(sword, AbilityCooldown)


def test_create_unit_builds_loadout_in_order():
    world = World()
    unit = create_unit(
        world,
        "Vale",
        Faction.PLAYER,
        (2, 3),
        ability_names=("sword_strike", "charge"),
        action_points=4.0,
        movement=3.0,
        role=Role.TANK,
    )
    entities = world.component_for_entity(unit, Loadout).ability_entities
    ids = [world.component_for_entity(e, Ability).ability_id for e in entities]
    assert ids == ["sword_strike", "charge"]
    points = world.component_for_entity(unit, ActionPoints)
    assert points.maximum == 4.0 and points.movement_maximum == 3.0
    assert world.component_for_entity(unit, TacticalAgent).role is Role.TANK
    assert world.component_for_entity(unit, Combatant).faction is Faction.PLAYER


def test_units_without_role_are_not_agents():
    world = World()
    unit = create_unit(world, "Villager", Faction.NEUTRAL, (0, 0))
    assert not world.has_component(unit, TacticalAgent)
