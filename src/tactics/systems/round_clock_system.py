from __future__ import annotations

from esper import World

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.events.bus import (
    EventBus,
    EVENT_COMBAT_ENDED,
    EVENT_COMBAT_STARTED,
    EVENT_ROUND_ADVANCED,
    EVENT_TICK,
)
from tactics.utils.combat_state import find_combat_state


class RoundClockSystem:
    """Answers "which round is it?" from the best source available.

    Sources, in order: the host's authoritative ``CombatState.round``; rounds
    counted from ``round_advanced`` events; an estimate from elapsed tick time
    under a fixed round duration. The estimate drifts whenever real rounds run
    longer or shorter than assumed and is only a best-effort fallback.
    """

    def __init__(self, world: World, event_bus: EventBus, config: TacticalConfig = DEFAULT_CONFIG) -> None:
        self.world = world
        self.event_bus = event_bus
        self.config = config
        self.elapsed = 0.0
        self.signalled_rounds = 0
        self.signalled = False
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_COMBAT_STARTED, self.on_combat_started)
        event_bus.subscribe(EVENT_COMBAT_ENDED, self.on_combat_ended)
        event_bus.subscribe(EVENT_ROUND_ADVANCED, self.on_round_advanced)

    def on_tick(self, sender, **payload) -> None:
        self.elapsed += max(0.0, float(payload.get("dt", 0.0)))

    def on_combat_started(self, sender, **payload) -> None:
        self.elapsed = 0.0
        self.signalled_rounds = 0
        self.signalled = False

    def on_combat_ended(self, sender, **payload) -> None:
        self.elapsed = 0.0
        self.signalled_rounds = 0
        self.signalled = False

    def on_round_advanced(self, sender, **payload) -> None:
        round_number = payload.get("round")
        if round_number is not None:
            self.signalled_rounds = max(0, int(round_number) - 1)
        else:
            self.signalled_rounds = self.current_round()
        self.signalled = True

    def is_authoritative(self) -> bool:
        state = find_combat_state(self.world)
        return state is not None and state.round is not None

    def current_round(self) -> int:
        state = find_combat_state(self.world)
        if state is not None and state.round is not None:
            return int(state.round)
        if self.signalled:
            return 1 + self.signalled_rounds
        duration = self.config.round_duration_seconds
        if duration <= 0:
            return 1
        return 1 + int(self.elapsed // duration)
