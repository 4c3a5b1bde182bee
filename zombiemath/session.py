from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from zombiemath.api.models import (
    EnemyView,
    FactView,
    LeaderboardEntry,
    LeaderboardPhase,
    PlayerView,
    SessionPhase,
    SessionSnapshot,
)
from zombiemath.core.collisions import resolve_companion_collisions, resolve_player_collisions
from zombiemath.core.difficulty import DifficultyScheduler
from zombiemath.core.entities import DIRECTIONS, Companion, Direction, Enemy, MathFact, Player
from zombiemath.core.facts import FactGenerator
from zombiemath.core.motion import advance, advance_companion, companion_position
from zombiemath.core.spawning import spawn_enemy
from zombiemath.fsm import SessionFSM
from zombiemath.leaderboard import LeaderboardCoordinator, LeaderboardRequest, LeaderboardResponse
from zombiemath.settings import DEFAULT_SETTINGS, GameSettings

logger = logging.getLogger(__name__)

INITIALS_LENGTH = 3


@dataclass(slots=True)
class SessionState:
    """Everything that belongs to one playthrough; rebuilt on restart."""

    player: Player
    difficulty: DifficultyScheduler
    facts: dict[Direction, MathFact]
    enemies: list[Enemy] = field(default_factory=list)
    companion: Companion = field(default_factory=Companion)

    timer: float = 0.0
    last_timestamp_ms: float | None = None
    last_spawn_ms: float | None = None

    damage_flash: float = 0.0
    solved_flash: float = 0.0
    solved_direction: Direction | None = None

    qualified: bool = False
    initials: str = ""


class GameSession:
    """One player's game: the per-frame simulation plus the post-game leaderboard flow.

    The session is synchronous. Leaderboard I/O leaves through `drain_requests()`
    and comes back through `deliver()`; responses are applied at the start of the
    next `tick()` and dropped if a restart happened in between.
    """

    def __init__(
        self,
        *,
        session_id: UUID | None = None,
        settings: GameSettings = DEFAULT_SETTINGS,
        rng: random.Random | None = None,
        facts: FactGenerator | None = None,
        leaderboard: LeaderboardCoordinator | None = None,
    ) -> None:
        self.session_id = session_id or uuid4()
        self.settings = settings
        self.rng = rng or random.Random()
        self.fact_generator = facts or FactGenerator(rng=self.rng, settings=settings)
        self.leaderboard = leaderboard

        self.fsm = SessionFSM()
        self.generation = 0
        self.leaderboard_entries: list[LeaderboardEntry] = []

        self._outbox: list[LeaderboardRequest] = []
        self._inbox: list[LeaderboardResponse] = []

        self.state = self._new_state()

    def _new_state(self) -> SessionState:
        s = self.settings
        return SessionState(
            player=Player(x=s.viewport_width / 2, y=s.viewport_height / 2, health=s.player_max_health),
            difficulty=DifficultyScheduler(settings=s),
            facts=self.fact_generator.generate_all_facts(),
        )

    # ----------------------------
    # Phase helpers
    # ----------------------------

    @property
    def phase(self) -> SessionPhase:
        return self.fsm.phase

    @property
    def leaderboard_phase(self) -> LeaderboardPhase | None:
        return self.fsm.leaderboard_phase

    # ----------------------------
    # Frame update
    # ----------------------------

    def tick(self, timestamp_ms: float) -> None:
        """Advance the session to `timestamp_ms` (monotonic, per animation frame)."""

        self._apply_responses()

        st = self.state
        if st.last_timestamp_ms is None:
            dt = 0.0
        else:
            dt = (timestamp_ms - st.last_timestamp_ms) / 1000
            dt = min(max(dt, 0.0), self.settings.max_step_seconds)
        st.last_timestamp_ms = timestamp_ms

        # World is frozen until the leaderboard arrives.
        if self.leaderboard_phase == LeaderboardPhase.loading:
            return

        if self.phase == SessionPhase.playing:
            self._simulate(dt)

        self._decay_timers(dt)

    def _simulate(self, dt: float) -> None:
        s = self.settings
        st = self.state

        st.timer += dt
        difficulty = st.difficulty.tick(st.timer)

        now_ms = st.timer * 1000
        if st.last_spawn_ms is None or now_ms - st.last_spawn_ms >= difficulty.spawn_interval_ms:
            st.enemies.append(spawn_enemy(player=st.player, speed=difficulty.enemy_speed, rng=self.rng, settings=s))
            st.last_spawn_ms = now_ms

        advance(st.enemies, st.player, dt)
        advance_companion(st.companion, orbit_speed=s.companion_orbit_speed, dt=dt)

        # Companion first: a grazing enemy can be destroyed before it reaches the player.
        star = companion_position(st.companion, st.player, radius=s.companion_orbit_radius)
        st.enemies = resolve_companion_collisions(star, st.enemies, s.companion_hit_distance).remaining

        hits = resolve_player_collisions(st.player, st.enemies, s.enemy_hit_distance, damage=s.enemy_damage)
        st.enemies = hits.remaining
        if hits.damaged:
            st.damage_flash = s.damage_flash_seconds
        if st.player.health <= 0:
            self._end_session()

    def _decay_timers(self, dt: float) -> None:
        st = self.state
        st.damage_flash = max(0.0, st.damage_flash - dt)

        if st.solved_direction is None:
            return
        st.solved_flash = max(0.0, st.solved_flash - dt)
        if st.solved_flash == 0.0:
            st.facts = self.fact_generator.generate_all_facts()
            st.solved_direction = None

    def _end_session(self) -> None:
        self.fsm.fire("die")
        logger.info("session %s over after %.1fs", self.session_id, self.state.timer)

        if self.leaderboard is None:
            return
        self.fsm.fire("start_leaderboard")
        self._outbox.append(LeaderboardRequest(kind="load", generation=self.generation))

    # ----------------------------
    # Player input
    # ----------------------------

    def submit_answer(self, value: object) -> Direction | None:
        """Move toward the direction whose fact `value` answers, if any.

        Ignored outside play, while a solved fact is still on display, and for
        anything that is not an integer.
        """

        st = self.state
        if self.phase != SessionPhase.playing or st.solved_direction is not None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            return None

        for direction in DIRECTIONS:
            fact = st.facts[direction]
            if fact.answer != value:
                continue
            distance = self.settings.move_distance_hard if fact.hard else self.settings.move_distance
            self._move_player(direction, distance)
            st.solved_direction = direction
            st.solved_flash = self.settings.solved_flash_seconds
            return direction

        return None

    def _move_player(self, direction: Direction, distance: float) -> None:
        player = self.state.player
        if direction == Direction.left:
            player.x -= distance
        elif direction == Direction.right:
            player.x += distance
        elif direction == Direction.up:
            player.y -= distance
        else:
            player.y += distance

    def _require_initials_phase(self) -> None:
        if self.leaderboard_phase != LeaderboardPhase.initials:
            raise ValueError("Session is not awaiting initials")

    def enter_initials(self, text: str) -> str:
        """Append letters to the pending initials; anything outside A-Z is dropped."""

        self._require_initials_phase()
        st = self.state
        for ch in text.upper():
            if len(st.initials) >= INITIALS_LENGTH:
                break
            if "A" <= ch <= "Z":
                st.initials += ch
        return st.initials

    def erase_initial(self) -> str:
        self._require_initials_phase()
        self.state.initials = self.state.initials[:-1]
        return self.state.initials

    def submit_initials(self) -> LeaderboardEntry:
        self._require_initials_phase()
        if self.leaderboard is None:
            raise ValueError("Session has no leaderboard")
        st = self.state
        if len(st.initials) != INITIALS_LENGTH:
            raise ValueError(f"Initials need exactly {INITIALS_LENGTH} letters")

        entry = LeaderboardEntry(initials=st.initials, time=st.timer)
        self.leaderboard_entries = self.leaderboard.insert(self.leaderboard_entries, entry)
        self.fsm.fire("submit_initials")

        # The table shown to the player is already updated; persistence catches up.
        self._outbox.append(LeaderboardRequest(kind="save", generation=self.generation, entry=entry))
        return entry

    def restart(self) -> None:
        self.fsm.fire("restart")
        self.generation += 1
        self.state = self._new_state()
        logger.info("session %s restarted (generation %d)", self.session_id, self.generation)

    # ----------------------------
    # Leaderboard messages
    # ----------------------------

    def drain_requests(self) -> list[LeaderboardRequest]:
        requests, self._outbox = self._outbox, []
        return requests

    def deliver(self, response: LeaderboardResponse) -> None:
        self._inbox.append(response)

    def _apply_responses(self) -> None:
        responses, self._inbox = self._inbox, []
        for response in responses:
            if response.generation != self.generation:
                logger.debug(
                    "dropping stale %s response for generation %d (now %d)",
                    response.kind,
                    response.generation,
                    self.generation,
                )
                continue
            if response.kind == "load":
                self._on_leaderboard_loaded(response.entries)
            elif response.ok and self.leaderboard_phase == LeaderboardPhase.display:
                # The saved table may include entries other sessions wrote meanwhile.
                self.leaderboard_entries = list(response.entries)

    def _on_leaderboard_loaded(self, entries: list[LeaderboardEntry]) -> None:
        if self.leaderboard_phase != LeaderboardPhase.loading or self.leaderboard is None:
            return

        st = self.state
        self.leaderboard_entries = list(entries)
        st.qualified = self.leaderboard.qualifies(self.leaderboard_entries, st.timer)
        if st.qualified:
            logger.info("session %s qualified for the leaderboard with %.1fs", self.session_id, st.timer)
            self.fsm.fire("qualify")
        else:
            self.fsm.fire("skip_initials")

    # ----------------------------
    # Presentation
    # ----------------------------

    def snapshot(self) -> SessionSnapshot:
        st = self.state
        s = self.settings
        difficulty = st.difficulty.state
        return SessionSnapshot(
            session_id=self.session_id,
            generation=self.generation,
            phase=self.phase,
            leaderboard_phase=self.leaderboard_phase,
            player=PlayerView(x=st.player.x, y=st.player.y, health=st.player.health, max_health=s.player_max_health),
            enemies=[EnemyView(x=e.x, y=e.y, speed=e.speed) for e in st.enemies],
            companion=companion_position(st.companion, st.player, radius=s.companion_orbit_radius),
            facts={
                d.value: FactView(text=f.text, answer=f.answer, hard=f.hard, solved=d == st.solved_direction)
                for d, f in st.facts.items()
            },
            timer=st.timer,
            spawn_interval_ms=difficulty.spawn_interval_ms,
            enemy_speed=difficulty.enemy_speed,
            damage_flash=st.damage_flash,
            solved_flash=st.solved_flash,
            leaderboard=list(self.leaderboard_entries),
            qualified=st.qualified,
            initials=st.initials,
        )
