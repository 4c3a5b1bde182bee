from __future__ import annotations

import math
from dataclasses import dataclass, replace

from zombiemath.settings import DEFAULT_SETTINGS, GameSettings


@dataclass(frozen=True, slots=True)
class DifficultyState:
    spawn_interval_ms: int
    enemy_speed: float
    last_tick_index: int = 0


class DifficultyScheduler:
    """Ratchet that speeds enemies up and spawns them faster every tick period.

    Driven by session time, so frame rate has no influence. Calling `tick` more
    than once for the same tick index applies the step only once.
    """

    def __init__(self, *, settings: GameSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self.state = DifficultyState(
            spawn_interval_ms=settings.spawn_interval_initial_ms,
            enemy_speed=settings.enemy_base_speed,
        )

    def tick(self, elapsed_seconds: float) -> DifficultyState:
        s = self.settings
        tick_index = math.floor(elapsed_seconds / s.difficulty_tick_seconds)
        if tick_index > self.state.last_tick_index:
            self.state = replace(
                self.state,
                last_tick_index=tick_index,
                enemy_speed=self.state.enemy_speed + s.enemy_speed_increment,
                spawn_interval_ms=max(
                    s.spawn_interval_min_ms,
                    s.spawn_interval_initial_ms - tick_index * s.spawn_interval_decrease_ms,
                ),
            )
        return self.state
