from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from tactics.components.turn_state import DecisionKey

Position = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class UseAbility:
    ability_entity: int
    ability_id: str
    target_entity: Optional[int]
    reason: str
    target_position: Optional[Position] = None

    kind = "use_ability"


@dataclass(frozen=True, slots=True)
class Move:
    destination: Optional[Position]
    reason: str
    toward_entity: Optional[int] = None

    kind = "move"


@dataclass(frozen=True, slots=True)
class EndTurn:
    reason: str

    kind = "end_turn"


@dataclass(frozen=True, slots=True)
class Skip:
    reason: str

    kind = "skip"


ActionDecision = Union[UseAbility, Move, EndTurn, Skip]


def decision_key(decision: ActionDecision) -> DecisionKey:
    """Identity used for repeat detection and blacklisting."""
    if isinstance(decision, UseAbility):
        return ("use_ability", decision.ability_entity, decision.target_entity)
    if isinstance(decision, Move):
        return ("move", decision.toward_entity, None)
    return (decision.kind, None, None)


def is_passive(decision: ActionDecision) -> bool:
    return isinstance(decision, (EndTurn, Skip))
