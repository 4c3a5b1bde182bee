from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from zombiemath.api.models import LeaderboardPhase, SessionPhase


# FSM state value -> (phase, leaderboard sub-phase) exposed in snapshots.
_PHASES: dict[str, tuple[SessionPhase, LeaderboardPhase | None]] = {
    "playing": (SessionPhase.playing, None),
    "game_over": (SessionPhase.game_over, None),
    "leaderboard_loading": (SessionPhase.game_over, LeaderboardPhase.loading),
    "leaderboard_initials": (SessionPhase.game_over, LeaderboardPhase.initials),
    "leaderboard_display": (SessionPhase.game_over, LeaderboardPhase.display),
}


class SessionFSM(StateMachine):
    """Session phases.

    playing -> game_over -> leaderboard loading -> (initials ->) display -> playing.
    The session owns all game data; the FSM only guards which transitions are legal.
    """

    playing = State("playing", value="playing", initial=True)
    game_over = State("game_over", value="game_over")
    leaderboard_loading = State("leaderboard_loading", value="leaderboard_loading")
    leaderboard_initials = State("leaderboard_initials", value="leaderboard_initials")
    leaderboard_display = State("leaderboard_display", value="leaderboard_display")

    die = playing.to(game_over)
    start_leaderboard = game_over.to(leaderboard_loading)
    qualify = leaderboard_loading.to(leaderboard_initials)
    skip_initials = leaderboard_loading.to(leaderboard_display)
    submit_initials = leaderboard_initials.to(leaderboard_display)
    restart = (
        game_over.to(playing)
        | leaderboard_loading.to(playing)
        | leaderboard_display.to(playing)
    )

    @property
    def state_value(self) -> str:
        return str(self.current_state.value)

    @property
    def phase(self) -> SessionPhase:
        return _PHASES[self.state_value][0]

    @property
    def leaderboard_phase(self) -> LeaderboardPhase | None:
        return _PHASES[self.state_value][1]

    def fire(self, event: str) -> None:
        """Send `event`, turning an illegal transition into a ValueError."""

        try:
            self.send(event)
        except TransitionNotAllowed as e:
            raise ValueError(f"Cannot {event.replace('_', ' ')} while {self.state_value.replace('_', ' ')}") from e
