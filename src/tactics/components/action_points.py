from dataclasses import dataclass


@dataclass(slots=True)
class ActionPoints:
    """Per-turn resources: AP for abilities and movement points for repositioning."""

    current: float
    maximum: float
    movement: float = 0.0
    movement_maximum: float = 0.0

    def can_spend(self, amount: float) -> bool:
        return self.current >= amount

    def spend(self, amount: float) -> None:
        self.current = max(0.0, self.current - amount)

    def refill(self) -> None:
        self.current = self.maximum
        self.movement = self.movement_maximum
