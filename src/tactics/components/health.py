from dataclasses import dataclass


@dataclass(slots=True)
class Health:
    """Hit points of a combatant. Dead at zero."""

    current: int
    max_hp: int

    def clamp(self) -> None:
        self.current = min(max(self.current, 0), self.max_hp)

    def is_alive(self) -> bool:
        return self.current > 0

    def percent(self) -> float:
        # Units without a meaningful maximum read as unhurt.
        if self.max_hp <= 0:
            return 100.0
        return max(0.0, self.current) * 100.0 / self.max_hp
