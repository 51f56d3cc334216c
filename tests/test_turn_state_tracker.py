from tactics.ai.config import DEFAULT_CONFIG
from tactics.ai.timing import TimingCategory
from tactics.components.combatant import Faction
from tactics.events.bus import (
    EventBus,
    EVENT_ACTION_COMMITTED,
    EVENT_ACTION_FAILED,
    EVENT_COMBAT_ENDED,
    EVENT_COMBAT_STARTED,
    EVENT_ROUND_ADVANCED,
    EVENT_TICK,
    EVENT_UNIT_DIED,
    EVENT_UNIT_MOVED,
    EVENT_UNIT_TURN_STARTED,
)
from tactics.systems.turn_state_tracker import TurnStateTracker
from tactics.world import create_world
from tests.helpers import make_unit


def make_tracker(config=DEFAULT_CONFIG):
    bus = EventBus()
    world = create_world(bus)
    return world, bus, TurnStateTracker(world, bus, config)


def test_combat_start_and_end_forget_everything():
    world, bus, tracker = make_tracker()
    state = tracker.state_for(7)
    state.used_single_use.add("bloodoath")
    state.first_action_done = True

    bus.emit(EVENT_COMBAT_STARTED)
    assert tracker.peek(7) is None
    assert tracker.state_for(7).used_single_use == set()

    tracker.state_for(8)
    bus.emit(EVENT_COMBAT_ENDED, reason="victory")
    assert tuple(tracker.tracked_units()) == ()


def test_round_advance_keeps_single_use_memory():
    world, bus, tracker = make_tracker()
    tracker.record_commit(7, "Blood_Oath", TimingCategory.SELF_DAMAGE, True)
    state = tracker.state_for(7)
    assert state.first_action_done
    assert state.actions_performed == 1

    bus.emit(EVENT_ROUND_ADVANCED, round=2)

    assert not state.first_action_done
    assert state.actions_performed == 0
    assert state.used_single_use == {"bloodoath"}
    assert tracker.last_round == 2


def test_buffs_do_not_count_as_first_action():
    world, bus, tracker = make_tracker()
    state = tracker.record_commit(7, "concentrated_fire", TimingCategory.PRE_ATTACK_BUFF, False)
    assert not state.first_action_done
    assert state.actions_performed == 1


def test_committed_event_updates_state():
    world, bus, tracker = make_tracker()
    bus.emit(
        EVENT_ACTION_COMMITTED,
        unit_entity=7,
        ability_entity=40,
        ability_id="dispatch",
        category=TimingCategory.FINISHER,
        single_use=False,
        target_entity=9,
    )
    state = tracker.peek(7)
    assert state is not None and state.first_action_done


def test_unit_death_drops_state():
    world, bus, tracker = make_tracker()
    tracker.state_for(7)
    bus.emit(EVENT_UNIT_DIED, unit_entity=7)
    assert tracker.peek(7) is None


def test_sweep_drops_units_that_vanished():
    world, bus, tracker = make_tracker(DEFAULT_CONFIG.replace(sweep_interval_ticks=3))
    unit = make_unit(world, "Vale", Faction.PLAYER, (0, 0))
    tracker.state_for(unit)
    tracker.state_for(999)

    bus.emit(EVENT_TICK, dt=0.1)
    bus.emit(EVENT_TICK, dt=0.1)
    assert tracker.peek(999) is not None
    bus.emit(EVENT_TICK, dt=0.1)

    assert tracker.peek(999) is None
    assert tracker.peek(unit) is not None


def test_failures_blacklist_the_decision():
    world, bus, tracker = make_tracker()
    key = ("use_ability", 40, 9)
    bus.emit(EVENT_ACTION_FAILED, unit_entity=7, ability_entity=40, target_entity=9, decision_key=key)
    state = tracker.peek(7)
    assert key in state.blacklist
    assert state.consecutive_failures == 1

    bus.emit(EVENT_ACTION_FAILED, unit_entity=7, ability_entity=41, target_entity=9)
    assert ("use_ability", 41, 9) in state.blacklist
    assert state.consecutive_failures == 2

    tracker.record_commit(7, "sword_strike", TimingCategory.NORMAL, False)
    assert state.consecutive_failures == 0


def test_turn_start_clears_turn_bookkeeping():
    world, bus, tracker = make_tracker()
    state = tracker.record_failure(7, ("use_ability", 40, 9))
    state.blocked_dangerous_aoe.add(41)
    state.first_action_done = True

    bus.emit(EVENT_UNIT_TURN_STARTED, unit_entity=7)

    assert state.blacklist == set()
    assert state.blocked_dangerous_aoe == set()
    assert state.consecutive_failures == 0
    assert state.first_action_done


def test_moving_clears_repeat_and_failure_counters():
    world, bus, tracker = make_tracker()
    state = tracker.record_failure(7, ("move", 9, None))
    state.last_decision = ("move", 9, None)
    bus.emit(EVENT_UNIT_MOVED, unit_entity=7, destination=(1.0, 0.0))
    assert state.last_decision is None
    assert state.consecutive_failures == 0


def test_observe_round_detects_advance_and_rewind():
    world, bus, tracker = make_tracker()
    assert tracker.observe_round(1) is False
    state = tracker.record_commit(7, "blood_oath", TimingCategory.SELF_DAMAGE, True)

    assert tracker.observe_round(1) is False
    assert tracker.observe_round(2) is True
    assert not state.first_action_done
    assert state.used_single_use == {"bloodoath"}

    # A rewind resets the round but never the single-use memory.
    state.first_action_done = True
    assert tracker.observe_round(1) is True
    assert tracker.peek(7) is state
    assert not state.first_action_done
    assert state.used_single_use == {"bloodoath"}
    assert tracker.last_round == 1


def test_hook_before_counter_bump_is_one_round():
    world, bus, tracker = make_tracker()
    host_round = [1]
    tracker.round_source = lambda: host_round[0]
    tracker.observe_round(1)
    state = tracker.record_commit(7, "blood_oath", TimingCategory.SELF_DAMAGE, True)

    bus.emit(EVENT_ROUND_ADVANCED, round=None)
    assert not state.first_action_done
    assert tracker.observe_round(1) is False

    tracker.record_commit(7, "sword_strike", TimingCategory.NORMAL, False)
    host_round[0] = 2
    assert tracker.observe_round(2) is False
    assert state.first_action_done
    assert state.used_single_use == {"bloodoath"}
    assert tracker.last_round == 2

    assert tracker.observe_round(3) is True
    assert not state.first_action_done
