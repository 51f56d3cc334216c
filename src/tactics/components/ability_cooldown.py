from dataclasses import dataclass


@dataclass(slots=True)
class AbilityCooldown:
    """Tracks per-ability cooldown state in rounds remaining."""

    remaining_turns: int = 0

    def is_ready(self) -> bool:
        return self.remaining_turns <= 0
