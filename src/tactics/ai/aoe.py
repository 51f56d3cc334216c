"""Area-of-effect detection and friendly-fire safety checks."""
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence, Tuple

from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.heuristics import contains_any
from tactics.components.ability import Ability
from tactics.components.area_pattern import AreaPattern, PatternShape

logger = logging.getLogger(__name__)

Position = Tuple[float, float]

# Weapon fire modes that name a single target even though they are weapon attacks.
SINGLE_TARGET_WEAPON_KEYWORDS = ("burstfire", "singleshot", "fullburst", "meleeattack", "swords")
AREA_NAME_KEYWORDS = ("stare", "explod", "area", "cone", "wave", "blast", "scream", "폭발", "화염")
AREA_ID_KEYWORDS = ("aoe", "lidless", "scatter", "warpfire", "psychicscream", "grenade", "flamer")


def _compact(ability: Ability) -> str:
    return f"{ability.ability_id}{ability.name}".lower().replace("_", "").replace(" ", "")


def is_area_ability(ability: Ability) -> bool:
    if not (ability.can_target_enemy or ability.can_target_point):
        return False
    name = _compact(ability)
    if ability.weapon_linked and contains_any(name, SINGLE_TARGET_WEAPON_KEYWORDS):
        return False
    if ability.is_area or ability.pattern is not None:
        return True
    if ability.can_target_enemy and ability.can_target_ally and not ability.can_target_self:
        return True
    if ability.can_target_point:
        return True
    return contains_any(name, AREA_NAME_KEYWORDS) or contains_any(name, AREA_ID_KEYWORDS)


def pattern_covers(
    pattern: AreaPattern,
    origin: Position,
    center: Position,
    point: Position,
) -> bool:
    """Whether ``point`` lies inside ``pattern`` cast from ``origin`` at ``center``."""
    if pattern.shape is PatternShape.CIRCLE:
        return math.dist(center, point) <= pattern.radius + 1e-9
    if pattern.shape is PatternShape.SQUARE:
        return max(abs(point[0] - center[0]), abs(point[1] - center[1])) <= pattern.radius + 1e-9
    vx, vy = center[0] - origin[0], center[1] - origin[1]
    aim = math.hypot(vx, vy)
    length = pattern.radius if pattern.radius > 0 else aim
    wx, wy = point[0] - origin[0], point[1] - origin[1]
    reach = math.hypot(wx, wy)
    if reach == 0.0 or reach > length + 1e-9:
        return False
    if aim == 0.0:
        return True
    ux, uy = vx / aim, vy / aim
    if pattern.shape is PatternShape.CONE:
        cos_angle = (wx * ux + wy * uy) / reach
        half = math.radians(pattern.angle / 2.0)
        return cos_angle >= math.cos(half) - 1e-9
    along = wx * ux + wy * uy
    if along <= 0:
        return False
    across = abs(wx * uy - wy * ux)
    return across <= pattern.width / 2.0 + 1e-9


class AoESafetyEvaluator:
    """Decides whether an area ability may be fired at a given point."""

    def __init__(self, config: TacticalConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def safety_radius(self, ability: Ability) -> float:
        if ability.weapon_linked:
            return self.config.area_weapon_safety_radius
        pattern = ability.pattern
        if pattern is not None and pattern.shape in (PatternShape.CIRCLE, PatternShape.SQUARE):
            return max(pattern.radius, 1.0)
        return self.config.aoe_safety_radius

    def allies_exposed(
        self,
        ability: Ability,
        caster: Position,
        center: Position,
        allies: Iterable[Position],
    ) -> int:
        radius = self.safety_radius(ability)
        exposed = sum(1 for pos in allies if math.dist(pos, center) <= radius)
        caster_distance = math.dist(caster, center)
        if self.config.aoe_origin_clearance < caster_distance <= radius:
            exposed += 1
        return exposed

    def is_safe(
        self,
        ability: Ability,
        caster: Position,
        center: Position,
        allies: Iterable[Position],
    ) -> bool:
        exposed = self.allies_exposed(ability, caster, center, allies)
        if exposed > self.config.aoe_max_allies_exposed:
            logger.debug(
                "%s at %s unsafe: %d allies exposed", ability.ability_id, center, exposed
            )
            return False
        return True

    def enemies_caught(
        self,
        ability: Ability,
        caster: Position,
        center: Position,
        enemies: Iterable[Position],
    ) -> int:
        pattern = ability.pattern
        if pattern is not None:
            return sum(1 for pos in enemies if pattern_covers(pattern, caster, center, pos))
        radius = self.config.aoe_efficiency_radius
        return sum(1 for pos in enemies if math.dist(pos, center) <= radius)

    def is_efficient(
        self,
        ability: Ability,
        caster: Position,
        center: Position,
        enemies: Sequence[Position],
    ) -> bool:
        return self.enemies_caught(ability, caster, center, enemies) >= self.config.aoe_min_enemies

    def pattern_hits(
        self,
        ability: Ability,
        caster: Position,
        center: Position,
        allies: Iterable[Position],
        pattern: Optional[AreaPattern] = None,
    ) -> Tuple[int, bool]:
        """Count allies inside the ability's actual shape and whether it hits the caster."""
        pattern = pattern or ability.pattern
        if pattern is None:
            pattern = AreaPattern(PatternShape.CIRCLE, radius=self.safety_radius(ability))
        allies_hit = sum(1 for pos in allies if pattern_covers(pattern, caster, center, pos))
        hits_self = False
        if pattern.shape in (PatternShape.CIRCLE, PatternShape.SQUARE):
            if math.dist(caster, center) > self.config.aoe_origin_clearance:
                hits_self = pattern_covers(pattern, caster, center, caster)
        return allies_hit, hits_self
