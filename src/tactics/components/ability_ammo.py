from dataclasses import dataclass


@dataclass(slots=True)
class AbilityAmmo:
    """Magazine backing a weapon-linked ability."""

    current: int
    maximum: int
    per_use: int = 1

    def can_fire(self) -> bool:
        return self.current >= self.per_use

    def is_spent(self) -> bool:
        return self.current < self.maximum
