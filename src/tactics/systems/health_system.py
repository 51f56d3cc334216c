from esper import World

from tactics.components.health import Health
from tactics.events.bus import (
    EventBus,
    EVENT_HEALTH_CHANGED,
    EVENT_HEALTH_DAMAGE,
    EVENT_HEALTH_HEAL,
    EVENT_UNIT_DIED,
)


class HealthSystem:
    """Applies damage and healing requests to combatants.

    Emits EVENT_HEALTH_CHANGED after every mutation and EVENT_UNIT_DIED the
    moment a unit's health first reaches zero.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_HEALTH_DAMAGE, self.on_health_damage)
        self.event_bus.subscribe(EVENT_HEALTH_HEAL, self.on_health_heal)

    def on_health_damage(self, sender, **kwargs):
        self._apply(kwargs, sign=-1)

    def on_health_heal(self, sender, **kwargs):
        self._apply(kwargs, sign=1)

    def _apply(self, kwargs, sign: int) -> None:
        target_entity = kwargs.get('target_entity')
        amount = kwargs.get('amount', 0)
        if target_entity is None or amount <= 0:
            return
        try:
            health = self.world.component_for_entity(target_entity, Health)
        except KeyError:
            return
        was_alive = health.is_alive()
        if not was_alive and sign > 0:
            return
        old_hp = health.current
        health.current += sign * int(amount)
        health.clamp()
        self.event_bus.emit(
            EVENT_HEALTH_CHANGED,
            entity=target_entity,
            current=health.current,
            max_hp=health.max_hp,
            delta=health.current - old_hp,
            reason=kwargs.get('reason', 'unknown'),
            source_entity=kwargs.get('source_entity'),
        )
        if was_alive and not health.is_alive():
            self.event_bus.emit(EVENT_UNIT_DIED, unit_entity=target_entity)
