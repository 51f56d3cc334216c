from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

DecisionKey = Tuple[str, Optional[int], Optional[int]]


@dataclass(slots=True)
class TurnState:
    """Tracks one unit's progress through its turn within the current combat.

    Round-scoped fields reset on round advance; ``used_single_use`` survives
    until the combat ends.
    """

    unit_entity: int
    first_action_done: bool = False
    actions_performed: int = 0
    used_single_use: Set[str] = field(default_factory=set)
    last_decision: Optional[DecisionKey] = None
    last_decision_at: float = 0.0
    blacklist: Set[DecisionKey] = field(default_factory=set)
    consecutive_failures: int = 0
    blocked_dangerous_aoe: Set[int] = field(default_factory=set)
    used_this_turn: Set[int] = field(default_factory=set)

    def reset_turn(self) -> None:
        self.last_decision = None
        self.last_decision_at = 0.0
        self.blacklist.clear()
        self.consecutive_failures = 0
        self.blocked_dangerous_aoe.clear()
        self.used_this_turn.clear()

    def reset_round(self) -> None:
        self.first_action_done = False
        self.actions_performed = 0
        self.reset_turn()
