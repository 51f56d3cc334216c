from dataclasses import dataclass
from typing import Tuple


@dataclass(slots=True)
class GridPosition:
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)
