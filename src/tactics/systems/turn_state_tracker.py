from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Optional

from esper import World

from tactics.ai.catalog import normalize_ability_id
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.timing import BUFF_CATEGORIES, TimingCategory
from tactics.components.turn_state import DecisionKey, TurnState
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
from tactics.utils.combatants import is_live_combatant

logger = logging.getLogger(__name__)


class TurnStateTracker:
    """Per-unit turn state for the current combat.

    Lifecycle:
      - combat start / end: forget every unit.
      - round advance: reset first-action flags, action counters and per-turn
        bookkeeping; single-use memory is kept until the combat ends.
      - round rewind: same as a round advance; only combat start / end clear
        single-use memory.
      - unit death: drop the unit's state immediately; a periodic sweep also
        drops states of units that vanished without a death event.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        config: TacticalConfig = DEFAULT_CONFIG,
        round_source: Optional[Callable[[], int]] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.config = config
        self.round_source = round_source
        self._absorb_next_advance = False
        self._states: Dict[int, TurnState] = {}
        self._last_round: Optional[int] = None
        self._ticks = 0
        event_bus.subscribe(EVENT_COMBAT_STARTED, self.on_combat_started)
        event_bus.subscribe(EVENT_COMBAT_ENDED, self.on_combat_ended)
        event_bus.subscribe(EVENT_ROUND_ADVANCED, self.on_round_advanced)
        event_bus.subscribe(EVENT_UNIT_DIED, self.on_unit_died)
        event_bus.subscribe(EVENT_UNIT_TURN_STARTED, self.on_unit_turn_started)
        event_bus.subscribe(EVENT_ACTION_COMMITTED, self.on_action_committed)
        event_bus.subscribe(EVENT_UNIT_MOVED, self.on_unit_moved)
        event_bus.subscribe(EVENT_ACTION_FAILED, self.on_action_failed)
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    # --- Event handlers -------------------------------------------------
    def on_combat_started(self, sender, **payload) -> None:
        self.reset_all()
        logger.info("Combat started: turn states cleared")

    def on_combat_ended(self, sender, **payload) -> None:
        self.reset_all()
        logger.info("Combat ended: turn states cleared")

    def on_round_advanced(self, sender, **payload) -> None:
        self.advance_round(payload.get("round"))

    def on_unit_died(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        if unit_entity is None:
            return
        self.forget(unit_entity)

    def on_unit_turn_started(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        if unit_entity is None:
            return
        state = self._states.get(unit_entity)
        if state is not None:
            state.reset_turn()

    def on_action_committed(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        ability_id = payload.get("ability_id")
        if unit_entity is None or ability_id is None:
            return
        self.record_commit(
            unit_entity,
            ability_id,
            payload.get("category", TimingCategory.NORMAL),
            bool(payload.get("single_use", False)),
            ability_entity=payload.get("ability_entity"),
        )

    def on_unit_moved(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        state = self._states.get(unit_entity) if unit_entity is not None else None
        if state is None:
            return
        state.last_decision = None
        state.consecutive_failures = 0

    def on_action_failed(self, sender, **payload) -> None:
        unit_entity = payload.get("unit_entity")
        if unit_entity is None:
            return
        key: DecisionKey = payload.get("decision_key") or (
            "use_ability",
            payload.get("ability_entity"),
            payload.get("target_entity"),
        )
        self.record_failure(unit_entity, key)

    def on_tick(self, sender, **payload) -> None:
        self._ticks += 1
        interval = max(1, self.config.sweep_interval_ticks)
        if self._ticks % interval == 0:
            self.sweep()

    # --- State access ---------------------------------------------------
    def state_for(self, unit_entity: int) -> TurnState:
        state = self._states.get(unit_entity)
        if state is None:
            state = TurnState(unit_entity=unit_entity)
            self._states[unit_entity] = state
        return state

    def peek(self, unit_entity: int) -> Optional[TurnState]:
        return self._states.get(unit_entity)

    def tracked_units(self) -> Iterable[int]:
        return tuple(self._states)

    @property
    def last_round(self) -> Optional[int]:
        return self._last_round

    # --- Transitions ----------------------------------------------------
    def reset_all(self) -> None:
        self._states.clear()
        self._last_round = None
        self._absorb_next_advance = False

    def forget(self, unit_entity: int) -> None:
        if self._states.pop(unit_entity, None) is not None:
            logger.debug("Dropped turn state of %s", unit_entity)

    def advance_round(self, round_number: Optional[int] = None) -> None:
        self._reset_rounds()
        if round_number is not None:
            self._last_round = round_number
        elif self.round_source is not None:
            observed = self.round_source()
            if self._last_round is not None and observed <= self._last_round:
                # Hook fired before the host bumped its counter: the next
                # increase is this same round.
                self._absorb_next_advance = True
            else:
                self._last_round = observed
        elif self._last_round is not None:
            self._last_round += 1
        logger.debug("Round advanced to %s", self._last_round)

    def observe_round(self, round_number: int) -> bool:
        """Sync with the host's round counter; return True when state was reset."""
        if self._last_round is None:
            self._last_round = round_number
            return False
        if round_number > self._last_round:
            if self._absorb_next_advance:
                self._absorb_next_advance = False
                self._last_round = round_number
                return False
            self.advance_round(round_number)
            return True
        if round_number < self._last_round:
            logger.info("Round went back from %s to %s", self._last_round, round_number)
            self._reset_rounds()
            self._last_round = round_number
            return True
        return False

    def _reset_rounds(self) -> None:
        self._absorb_next_advance = False
        for state in self._states.values():
            state.reset_round()

    def record_commit(
        self,
        unit_entity: int,
        ability_id: str,
        category: TimingCategory,
        single_use: bool,
        ability_entity: Optional[int] = None,
    ) -> TurnState:
        state = self.state_for(unit_entity)
        state.actions_performed += 1
        if ability_entity is not None:
            state.used_this_turn.add(ability_entity)
        if category not in BUFF_CATEGORIES:
            state.first_action_done = True
        if single_use:
            state.used_single_use.add(normalize_ability_id(ability_id))
        state.last_decision = None
        state.consecutive_failures = 0
        return state

    def record_failure(self, unit_entity: int, key: DecisionKey) -> TurnState:
        state = self.state_for(unit_entity)
        state.blacklist.add(key)
        state.consecutive_failures += 1
        logger.info(
            "Blacklisted %s for unit %s (%d consecutive failures)",
            key,
            unit_entity,
            state.consecutive_failures,
        )
        return state

    def sweep(self) -> int:
        stale = [unit for unit in self._states if not is_live_combatant(self.world, unit)]
        for unit in stale:
            del self._states[unit]
        if stale:
            logger.debug("Swept %d stale turn states", len(stale))
        return len(stale)
