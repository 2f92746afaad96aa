"""Self-play harness measuring how often the opponent policy wins."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from . import actions
from .opponent import OpponentPolicy
from .state import MatchConfig, Turn, deal_new_match

__all__ = ["MatchOutcome", "SelfPlayReport", "play_match", "run_self_play"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchOutcome:
    """Result of a single simulated match."""

    winner: Turn | None
    turns: int


@dataclass(frozen=True, slots=True)
class SelfPlayReport:
    """Aggregate results of a self-play run."""

    matches: int
    player_wins: int
    opponent_wins: int
    stalled: int
    average_turns: float

    @property
    def opponent_win_rate(self) -> float:
        decided = self.player_wins + self.opponent_wins
        return self.opponent_wins / decided if decided else 0.0


def play_match(
    config: MatchConfig,
    rng: random.Random,
    seats: dict[Turn, OpponentPolicy],
    *,
    max_turns: int = 500,
) -> MatchOutcome:
    """Play one match with a policy in each seat.

    A match that has not finished after ``max_turns`` actions is reported
    without a winner; both seats can keep skipping once the deck is empty.
    """

    game_state = deal_new_match(config, rng)
    for turn_number in range(max_turns):
        if game_state.is_over:
            return MatchOutcome(winner=game_state.winner, turns=turn_number)
        seat = game_state.turn
        action = seats[seat].choose_action(game_state, seat)
        game_state = actions.apply_action(game_state, seat, action)
    if game_state.is_over:
        return MatchOutcome(winner=game_state.winner, turns=max_turns)
    logger.debug("match stalled after %d turns", max_turns)
    return MatchOutcome(winner=None, turns=max_turns)


def run_self_play(
    matches: int,
    *,
    seed: int = 123,
    fumble_chance: float = 0.5,
    max_turns: int = 500,
) -> SelfPlayReport:
    """Pit the opponent policy against a greedy never-fumbling baseline seat."""

    if matches <= 0:
        raise ValueError("matches must be positive")

    rng = random.Random(seed)
    config = MatchConfig(fumble_chance=fumble_chance, seed=seed)
    seats = {
        Turn.PLAYER: OpponentPolicy(fumble_chance=0.0, rng=rng),
        Turn.OPPONENT: OpponentPolicy(fumble_chance=fumble_chance, rng=rng),
    }

    wins = {Turn.PLAYER: 0, Turn.OPPONENT: 0}
    stalled = 0
    total_turns = 0
    for _ in range(matches):
        outcome = play_match(config, rng, seats, max_turns=max_turns)
        total_turns += outcome.turns
        if outcome.winner is None:
            stalled += 1
        else:
            wins[outcome.winner] += 1

    report = SelfPlayReport(
        matches=matches,
        player_wins=wins[Turn.PLAYER],
        opponent_wins=wins[Turn.OPPONENT],
        stalled=stalled,
        average_turns=total_turns / matches,
    )
    logger.info(
        "self-play finished: %d matches, opponent win rate %.2f",
        matches,
        report.opponent_win_rate,
    )
    return report
