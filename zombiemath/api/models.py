from __future__ import annotations

from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field


class SessionPhase(StrEnum):
    playing = "playing"
    game_over = "game_over"


class LeaderboardPhase(StrEnum):
    loading = "loading"
    initials = "initials"
    display = "display"


class LeaderboardEntry(BaseModel):
    initials: str = Field(..., pattern=r"^[A-Z]{3}$")
    time: float = Field(..., ge=0)


class LeaderboardTable(BaseModel):
    """Stored document: the whole top-N table under a single key."""

    entries: list[LeaderboardEntry] = Field(default_factory=list)


class PlayerView(BaseModel):
    x: float
    y: float
    health: int
    max_health: int


class EnemyView(BaseModel):
    x: float
    y: float
    speed: float


class FactView(BaseModel):
    text: str
    answer: int
    hard: bool
    # True while this fact is being shown as the one just answered.
    solved: bool = False


class SessionSnapshot(BaseModel):
    """Read-only view of a session for presentation."""

    session_id: UUID
    generation: int

    phase: SessionPhase
    leaderboard_phase: LeaderboardPhase | None = None

    player: PlayerView
    enemies: list[EnemyView] = Field(default_factory=list)
    companion: tuple[float, float]
    facts: dict[str, FactView] = Field(default_factory=dict)

    timer: float
    spawn_interval_ms: int
    enemy_speed: float

    damage_flash: float = 0.0
    solved_flash: float = 0.0

    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)
    qualified: bool = False
    initials: str = ""


class SessionCreateRequest(BaseModel):
    seed: int | None = None


class TickRequest(BaseModel):
    timestamp_ms: float = Field(..., ge=0)


class AnswerRequest(BaseModel):
    text: str = Field(..., max_length=200)


class AnswerResponse(BaseModel):
    matched: str | None = None
    snapshot: SessionSnapshot


class InitialsRequest(BaseModel):
    letters: str = Field(..., max_length=32)


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
