from __future__ import annotations

import math
from collections.abc import Iterable

from zombiemath.core.entities import Companion, Enemy, Player

# Enemy speeds are tuned per frame at this rate.
FRAME_RATE = 60


def advance(enemies: Iterable[Enemy], player: Player, dt: float) -> None:
    """Move every enemy straight toward the player."""

    for enemy in enemies:
        dx = player.x - enemy.x
        dy = player.y - enemy.y
        distance = math.hypot(dx, dy)
        if distance > 0:
            step = enemy.speed * dt * FRAME_RATE
            enemy.x += (dx / distance) * step
            enemy.y += (dy / distance) * step


def advance_companion(companion: Companion, *, orbit_speed: float, dt: float) -> None:
    # Angle grows without bound; only sin/cos are read.
    companion.angle += orbit_speed * dt


def companion_position(companion: Companion, player: Player, *, radius: float) -> tuple[float, float]:
    return (
        player.x + math.cos(companion.angle) * radius,
        player.y + math.sin(companion.angle) * radius,
    )
