from __future__ import annotations

import math
from typing import Dict, FrozenSet, Iterable, Optional, Protocol, Tuple

from tactics.components.ability import Ability

Position = Tuple[float, float]
Tile = Tuple[int, int]


class BattlefieldGeometry(Protocol):
    """Spatial queries the decision engine needs from the host."""

    def distance(self, a: Position, b: Position) -> float:
        ...

    def can_target(
        self,
        ability: Ability,
        caster: Position,
        target: Position,
    ) -> Tuple[bool, str]:
        ...

    def reachable_tiles(
        self,
        origin: Position,
        budget: float,
        occupied: Iterable[Position] = (),
    ) -> Dict[Tile, float]:
        ...


class GridGeometry:
    """Straight-line distances on an open grid with optional blocking cells.

    Reachability is a budget radius around the unit, not a path search;
    hosts with real pathfinding supply their own geometry object.
    """

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        blocked: Iterable[Tile] = (),
        melee_reach: float = 1.5,
    ) -> None:
        self.width = width
        self.height = height
        self.blocked: FrozenSet[Tile] = frozenset(blocked)
        self.melee_reach = melee_reach

    def distance(self, a: Position, b: Position) -> float:
        return math.hypot(a[0] - b[0], a[1] - b[1])

    def can_target(
        self,
        ability: Ability,
        caster: Position,
        target: Position,
    ) -> Tuple[bool, str]:
        d = self.distance(caster, target)
        if d == 0.0:
            if ability.can_target_self or ability.range <= 0:
                return True, "self"
            return False, "cannot target own position"
        reach = max(ability.range, self.melee_reach)
        if d < ability.min_range:
            return False, f"too close ({d:.1f} < {ability.min_range:.1f})"
        if d > reach:
            return False, f"out of range ({d:.1f} > {reach:.1f})"
        if d > self.melee_reach and not self.has_line_of_sight(caster, target):
            return False, "no line of sight"
        return True, "in range"

    def has_line_of_sight(self, a: Position, b: Position) -> bool:
        if not self.blocked:
            return True
        start = (round(a[0]), round(a[1]))
        end = (round(b[0]), round(b[1]))
        for cell in _line_cells(start, end):
            if cell in (start, end):
                continue
            if cell in self.blocked:
                return False
        return True

    def reachable_tiles(
        self,
        origin: Position,
        budget: float,
        occupied: Iterable[Position] = (),
    ) -> Dict[Tile, float]:
        if budget <= 0:
            return {}
        taken = {(round(x), round(y)) for x, y in occupied}
        ox, oy = round(origin[0]), round(origin[1])
        span = int(math.floor(budget))
        tiles: Dict[Tile, float] = {}
        for x in range(ox - span, ox + span + 1):
            for y in range(oy - span, oy + span + 1):
                tile = (x, y)
                if tile == (ox, oy) or tile in self.blocked or tile in taken:
                    continue
                if not self._in_bounds(tile):
                    continue
                cost = self.distance((ox, oy), tile)
                if cost <= budget:
                    tiles[tile] = cost
        return tiles

    def _in_bounds(self, tile: Tile) -> bool:
        x, y = tile
        if x < 0 or y < 0:
            return self.width is None and self.height is None
        if self.width is not None and x >= self.width:
            return False
        if self.height is not None and y >= self.height:
            return False
        return True


def _line_cells(start: Tile, end: Tile) -> Iterable[Tile]:
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield (x0, y0)
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
