from dataclasses import dataclass
from enum import Enum


class PatternShape(Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    CONE = "cone"
    LINE = "line"


@dataclass(frozen=True, slots=True)
class AreaPattern:
    """Declared area of effect.

    Circles and squares are centred on the target point. Cones and lines start
    at the caster and extend towards the target; ``radius`` is their length
    (0 means "up to the target point").
    """

    shape: PatternShape
    radius: float = 1.0
    angle: float = 90.0
    width: float = 1.0
