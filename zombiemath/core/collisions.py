from __future__ import annotations

import math
from dataclasses import dataclass

from zombiemath.core.entities import Enemy, Player


@dataclass(frozen=True, slots=True)
class PlayerHits:
    """Result of resolving enemies against the player.

    - `damaged`: at least one enemy touched the player.
    - `enemies_removed`: enemies consumed by the hit, in collection order.
    - `remaining`: the surviving enemies; callers replace their list with it.
    """

    damaged: bool
    enemies_removed: list[Enemy]
    remaining: list[Enemy]


@dataclass(frozen=True, slots=True)
class CompanionHits:
    removed_count: int
    remaining: list[Enemy]


def _within(x: float, y: float, enemy: Enemy, hit_distance: float) -> bool:
    return math.hypot(x - enemy.x, y - enemy.y) < hit_distance


def resolve_player_collisions(
    player: Player,
    enemies: list[Enemy],
    hit_distance: float,
    *,
    damage: int = 1,
) -> PlayerHits:
    """Remove every enemy touching the player; each one costs `damage` health.

    Health is clamped at zero. Deciding what a zero-health player means is left
    to the session.
    """

    removed: list[Enemy] = []
    remaining: list[Enemy] = []
    for enemy in enemies:
        if _within(player.x, player.y, enemy, hit_distance):
            removed.append(enemy)
        else:
            remaining.append(enemy)

    if removed:
        player.health = max(0, player.health - damage * len(removed))

    return PlayerHits(damaged=bool(removed), enemies_removed=removed, remaining=remaining)


def resolve_companion_collisions(
    companion_pos: tuple[float, float],
    enemies: list[Enemy],
    hit_distance: float,
) -> CompanionHits:
    cx, cy = companion_pos
    remaining = [e for e in enemies if not _within(cx, cy, e, hit_distance)]
    return CompanionHits(removed_count=len(enemies) - len(remaining), remaining=remaining)
