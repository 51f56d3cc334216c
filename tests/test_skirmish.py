import logging

import pytest

import main
from main import run_skirmish, spawn_squads, surviving_side
from tactics.components.combatant import Faction
from tactics.components.health import Health
from tactics.events.bus import EventBus
from tactics.world import create_world


def test_skirmish_runs_to_an_outcome(caplog):
    caplog.set_level(logging.INFO)
    winner = run_skirmish(max_rounds=3)
    assert winner in (None, Faction.PLAYER, Faction.ENEMY)
    assert "Skirmish over" in caplog.text


def test_surviving_side():
    world = create_world(EventBus())
    squads = spawn_squads(world)
    assert surviving_side(world) is None
    for enemy in squads[Faction.ENEMY]:
        world.component_for_entity(enemy, Health).current = 0
    assert surviving_side(world) is Faction.PLAYER


def test_skirmish_refuses_to_run_without_a_sandbox(monkeypatch):
    real_create_runtime = main.create_runtime

    def without_sandbox(world, event_bus, **kwargs):
        kwargs["sandbox"] = False
        return real_create_runtime(world, event_bus, **kwargs)

    monkeypatch.setattr(main, "create_runtime", without_sandbox)
    with pytest.raises(RuntimeError):
        run_skirmish(max_rounds=1)
