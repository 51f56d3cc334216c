"""Healing and recovery abilities."""
from __future__ import annotations

from esper import World

from tactics.components.ability import Ability
from tactics.factories.ability_kits.base import spawn_ability


def create_ability_medikit(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="medikit",
            name="Medikit",
            ap_cost=1.0,
            range=1.0,
            can_target_self=True,
            can_target_enemy=False,
            can_target_ally=True,
            cooldown=1,
        ),
        overrides=overrides,
    )


def create_ability_emergency_stimm(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="emergency_stimm",
            name="Emergency stimm",
            ap_cost=1.0,
            range=0.0,
            can_target_self=True,
            can_target_enemy=False,
            single_use=True,
        ),
        overrides=overrides,
    )


def create_ability_war_hymn(world: World, **overrides) -> int:
    return spawn_ability(
        world,
        Ability(
            ability_id="war_hymn",
            name="War hymn",
            ap_cost=1.0,
            range=0.0,
            can_target_self=True,
            can_target_enemy=False,
            cooldown=2,
        ),
        overrides=overrides,
    )
