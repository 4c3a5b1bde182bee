from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Direction(StrEnum):
    left = "left"
    right = "right"
    up = "up"
    down = "down"


# Fixed evaluation order for fact slots and answer matching.
DIRECTIONS: tuple[Direction, ...] = (Direction.left, Direction.right, Direction.up, Direction.down)


@dataclass(slots=True)
class Player:
    x: float
    y: float
    health: int


@dataclass(slots=True)
class Enemy:
    """Zombie that seeks the player."""

    x: float
    y: float
    speed: float  # units per frame at 60 fps


@dataclass(slots=True)
class Companion:
    """Star orbiting the player; only the angle is state."""

    angle: float = 0.0


@dataclass(frozen=True, slots=True)
class MathFact:
    text: str
    answer: int
    hard: bool = False
