"""Weapon fire modes and reloads."""
from __future__ import annotations

from esper import World

from tactics.components.ability import Ability
from tactics.components.area_pattern import AreaPattern, PatternShape
from tactics.factories.ability_kits.base import spawn_ability


def create_ability_sword_strike(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="sword_strike", name="Sword strike", ap_cost=1.0, range=1.0, weapon_linked=True),
        overrides=overrides,
    )


def create_ability_single_shot(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(ability_id="single_shot", name="Single shot", ap_cost=1.0, range=8.0, weapon_linked=True),
        magazine=4,
        overrides=overrides,
    )


def create_ability_burst_fire(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="burst_fire",
            name="Burst fire",
            ap_cost=2.0,
            range=6.0,
            weapon_linked=True,
            pattern=AreaPattern(PatternShape.LINE, radius=6.0, width=1.0),
        ),
        magazine=6,
        overrides=overrides,
    )


def create_ability_flamer(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="flamer",
            name="Flamer",
            ap_cost=2.0,
            range=4.0,
            weapon_linked=True,
            is_area=True,
            pattern=AreaPattern(PatternShape.CONE, radius=4.0, angle=60.0),
        ),
        magazine=2,
        overrides=overrides,
    )


def create_ability_reload(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="reload",
            name="Reload",
            ap_cost=1.0,
            range=0.0,
            can_target_self=True,
            can_target_enemy=False,
            weapon_linked=True,
        ),
        overrides=overrides,
    )
