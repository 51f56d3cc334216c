from __future__ import annotations

import dataclasses
from typing import Any, Dict, Optional

from esper import World

from tactics.components.ability import Ability
from tactics.components.ability_ammo import AbilityAmmo
from tactics.components.ability_cooldown import AbilityCooldown

_ABILITY_FIELDS = {f.name for f in dataclasses.fields(Ability)}


def spawn_ability(
    world: World,
    ability: Ability,
    *,
    magazine: Optional[int] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> int:
    """Create an ability entity, applying per-call field overrides.

    ``magazine`` (or a ``magazine`` override) attaches a full AbilityAmmo.
    Unknown override names raise ValueError.
    """
    changes = dict(overrides or {})
    magazine = changes.pop("magazine", magazine)
    unknown = sorted(set(changes) - _ABILITY_FIELDS)
    if unknown:
        raise ValueError(f"Unknown ability fields: {', '.join(unknown)}")
    if changes:
        ability = dataclasses.replace(ability, **changes)
    components: list = [ability]
    if ability.cooldown > 0:
        components.append(AbilityCooldown())
    if magazine is not None:
        components.append(AbilityAmmo(current=int(magazine), maximum=int(magazine)))
    return world.create_entity(*components)
