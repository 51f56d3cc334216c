class TacticalError(Exception):
    """Base class for faults raised inside the decision engine."""


class SensorUnavailable(TacticalError):
    """A value the host is expected to publish could not be read."""

    def __init__(self, entity: int, what: str) -> None:
        super().__init__(f"Entity {entity}: {what} unavailable")
        self.entity = entity
        self.what = what


class UnknownUnitError(TacticalError):
    """Raised when asked to act for an entity that is not a combatant."""

    def __init__(self, entity: int) -> None:
        super().__init__(f"Entity {entity} is not a combatant")
        self.entity = entity
