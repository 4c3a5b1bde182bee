from __future__ import annotations

import random

from zombiemath.core.entities import Enemy, Player
from zombiemath.settings import DEFAULT_SETTINGS, GameSettings


def spawn_enemy(
    *,
    player: Player,
    speed: float,
    rng: random.Random,
    settings: GameSettings = DEFAULT_SETTINGS,
) -> Enemy:
    """Create an enemy just outside a random edge of the player-centered viewport."""

    width = settings.viewport_width
    height = settings.viewport_height
    margin = settings.enemy_spawn_margin
    size = settings.enemy_size

    # Camera origin: top-left corner of the viewport in world space.
    cam_x = player.x - width / 2
    cam_y = player.y - height / 2

    side = rng.choice(["top", "right", "bottom", "left"])
    if side == "top":
        x = cam_x + rng.randint(margin, width - margin)
        y = cam_y - size
    elif side == "right":
        x = cam_x + width + size
        y = cam_y + rng.randint(margin, height - margin)
    elif side == "bottom":
        x = cam_x + rng.randint(margin, width - margin)
        y = cam_y + height + size
    else:
        x = cam_x - size
        y = cam_y + rng.randint(margin, height - margin)

    return Enemy(x=x, y=y, speed=speed)
