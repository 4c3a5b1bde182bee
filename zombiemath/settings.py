from __future__ import annotations

import os
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class GameSettings:
    """Tuning constants for one game session.

    Distances are in world units (the viewport is 800x600 of them); enemy speeds
    are units per frame at 60 fps.
    """

    # Viewport, used for spawning just off-screen around the player.
    viewport_width: int = 800
    viewport_height: int = 600

    # Player
    player_max_health: int = 5
    move_distance: float = 96.0
    move_distance_hard: float = 144.0

    # Enemies
    enemy_size: float = 14.0
    enemy_spawn_margin: int = 30
    enemy_base_speed: float = 0.4
    enemy_speed_increment: float = 0.05
    enemy_damage: int = 1
    enemy_hit_distance: float = 22.0

    # Spawn schedule (milliseconds)
    spawn_interval_initial_ms: int = 3000
    spawn_interval_min_ms: int = 800
    spawn_interval_decrease_ms: int = 100

    # Difficulty ramp
    difficulty_tick_seconds: float = 30.0

    # Math facts
    operand_min: int = 2
    operand_max: int = 12
    division_chance: float = 0.25
    hard_operand_threshold: int = 7
    max_fact_attempts: int = 50

    # Orbiting companion
    companion_orbit_radius: float = 70.0
    companion_orbit_speed: float = 3.0  # rad/s
    companion_hit_distance: float = 20.0

    # Transient display timers (seconds)
    damage_flash_seconds: float = 0.15
    solved_flash_seconds: float = 1.0

    # Largest simulated step for a single frame (seconds)
    max_step_seconds: float = 0.05

    # Leaderboard
    leaderboard_size: int = 10

    # Server: sessions untouched this long are dropped from the registry
    session_idle_seconds: float = 1800.0


DEFAULT_SETTINGS = GameSettings()


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def settings_from_env(*, base: GameSettings = DEFAULT_SETTINGS) -> GameSettings:
    """Apply `ZOMBIEMATH_*` overrides on top of `base`.

    Only the knobs worth changing per deployment are exposed; everything else is
    a code-level constant.
    """

    return replace(
        base,
        player_max_health=_env_int("ZOMBIEMATH_PLAYER_MAX_HEALTH", base.player_max_health),
        division_chance=_env_float("ZOMBIEMATH_DIVISION_CHANCE", base.division_chance),
        difficulty_tick_seconds=_env_float("ZOMBIEMATH_DIFFICULTY_TICK_SECONDS", base.difficulty_tick_seconds),
        solved_flash_seconds=_env_float("ZOMBIEMATH_SOLVED_FLASH_SECONDS", base.solved_flash_seconds),
        leaderboard_size=_env_int("ZOMBIEMATH_LEADERBOARD_SIZE", base.leaderboard_size),
        session_idle_seconds=_env_float("ZOMBIEMATH_SESSION_IDLE_SECONDS", base.session_idle_seconds),
    )


def get_leaderboard_key() -> str:
    return os.environ.get("ZOMBIEMATH_LEADERBOARD_KEY", "zombiemath:leaderboard")
