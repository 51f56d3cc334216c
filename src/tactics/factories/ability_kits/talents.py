"""Class talents: buffs, finishers and the abilities that need careful timing."""
from __future__ import annotations

from esper import World

from tactics.components.ability import Ability
from tactics.components.area_pattern import AreaPattern, PatternShape
from tactics.factories.ability_kits.base import spawn_ability


def _self_buff(ability_id: str, name: str, ap_cost: float = 1.0) -> Ability:
    return Ability(
        ability_id=ability_id,
        name=name,
        ap_cost=ap_cost,
        range=0.0,
        can_target_self=True,
        can_target_enemy=False,
    )


def create_ability_concentrated_fire(world: World, **overrides) -> int:
    return spawn_ability(world, _self_buff("concentrated_fire", "Concentrated fire"), overrides=overrides)


def create_ability_defensive_stance(world: World, **overrides) -> int:
    return spawn_ability(world, _self_buff("defensive_stance", "Defensive stance"), overrides=overrides)


def create_ability_veil_of_blades(world: World, **overrides) -> int:
    return spawn_ability(world, _self_buff("veil_of_blades", "Veil of blades", ap_cost=0.0), overrides=overrides)


def create_ability_righteous_fury(world: World, **overrides) -> int:
    return spawn_ability(world, _self_buff("righteous_fury", "Righteous fury", ap_cost=0.0), overrides=overrides)


def create_ability_run_and_gun(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="run_and_gun", name="Run and gun", ap_cost=1.0, range=6.0),
        overrides=overrides,
    )


def create_ability_dispatch(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="dispatch", name="Dispatch", ap_cost=1.0, range=1.0, cooldown=2),
        overrides=overrides,
    )


def create_ability_blood_oath(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="blood_oath", name="Blood oath", ap_cost=1.0, range=1.0, single_use=True),
        overrides=overrides,
    )


def create_ability_charge(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="charge", name="Charge", ap_cost=2.0, range=5.0, min_range=2.0, cooldown=2),
        overrides=overrides,
    )


def create_ability_expose_weakness(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="expose_weakness", name="Expose weakness", ap_cost=1.0, range=6.0),
        overrides=overrides,
    )


def create_ability_taunt(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="taunt", name="Taunt", ap_cost=1.0, range=4.0, cooldown=3),
        overrides=overrides,
    )


def create_ability_lidless_stare(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="lidless_stare",
            name="Lidless stare",
            ap_cost=2.0,
            range=6.0,
            can_target_enemy=True,
            can_target_ally=True,
            pattern=AreaPattern(PatternShape.CONE, radius=6.0, angle=45.0),
            cooldown=2,
        ),
        overrides=overrides,
    )


def create_ability_heroic_strike(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="heroic_strike", name="Heroic strike", ap_cost=1.0, range=1.0, single_use=True),
        overrides=overrides,
    )


def create_ability_frag_grenade(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="frag_grenade",
            name="Frag grenade",
            ap_cost=1.0,
            range=6.0,
            can_target_point=True,
            single_use=True,
            pattern=AreaPattern(PatternShape.CIRCLE, radius=2.0),
        ),
        overrides=overrides,
    )
