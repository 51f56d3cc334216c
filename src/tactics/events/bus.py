from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"  # payload: dt=float


# ============================================================================
# COMBAT LIFECYCLE
# ============================================================================
EVENT_COMBAT_STARTED = "combat_started"          # payload: None
EVENT_COMBAT_ENDED = "combat_ended"              # payload: reason=str|None
EVENT_ROUND_ADVANCED = "round_advanced"          # payload: round=int|None
EVENT_UNIT_TURN_STARTED = "unit_turn_started"    # payload: unit_entity=int
EVENT_UNIT_DIED = "unit_died"                    # payload: unit_entity=int


# ============================================================================
# ACTIONS & DECISIONS
# ============================================================================
EVENT_DECISION_MADE = "decision_made"            # payload: unit_entity=int, decision=ActionDecision
EVENT_ACTION_COMMITTED = "action_committed"      # payload: unit_entity=int, ability_entity=int, ability_id=str, category=TimingCategory, single_use=bool, target_entity=int|None
EVENT_UNIT_MOVED = "unit_moved"                  # payload: unit_entity=int, destination=(x,y)|None
EVENT_ACTION_FAILED = "action_failed"            # payload: unit_entity=int, ability_entity=int|None, target_entity=int|None, decision_key=tuple|None
EVENT_DANGEROUS_AOE_BLOCKED = "dangerous_aoe_blocked"  # payload: unit_entity=int, ability_entity=int, target_entity=int, allies=int, hits_self=bool


# ============================================================================
# HEALTH & DAMAGE
# ============================================================================
EVENT_HEALTH_DAMAGE = "health_damage"            # payload: source_entity=int|None, target_entity=int, amount=int, reason=str
EVENT_HEALTH_HEAL = "health_heal"                # payload: source_entity=int|None, target_entity=int, amount=int, reason=str
EVENT_HEALTH_CHANGED = "health_changed"          # payload: entity=int, current=int, max_hp=int, delta=int, reason=str, source_entity=int|None
