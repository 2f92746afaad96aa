from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from crazyeights import actions
from crazyeights.cards import Card, Rank, Suit
from crazyeights.opponent import OpponentPolicy
from crazyeights.orchestrator import (
    DEFEAT_MESSAGE,
    EMPTY_DECK_MESSAGE,
    VICTORY_MESSAGE,
    WELCOME_MESSAGE,
    TurnOrchestrator,
)
from crazyeights.state import MatchConfig, MatchSnapshot, MatchState, MatchStatus, Turn


class FixedRandom:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class _Handle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects delayed callbacks so tests decide when they run."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], object], _Handle]] = []

    def call_later(self, delay: float, callback: Callable[[], object]) -> _Handle:
        handle = _Handle()
        self.calls.append((delay, callback, handle))
        return handle

    def run_pending(self) -> None:
        calls, self.calls = self.calls, []
        for _, callback, handle in calls:
            if not handle.cancelled:
                callback()


class ImmediateScheduler:
    """Runs callbacks as soon as they are scheduled."""

    def __init__(self) -> None:
        self.calls = 0

    def call_later(self, delay: float, callback: Callable[[], object]) -> _Handle:
        self.calls += 1
        callback()
        return _Handle()


def _card(suit: Suit, rank: Rank, tag: str = "a") -> Card:
    return Card(id=f"{suit.value}-{rank.value}-{tag}", suit=suit, rank=rank)


KING = _card(Suit.GRYFFINDOR, Rank.KING)
WILD = _card(Suit.SLYTHERIN, Rank.EIGHT)
BLOCKED = _card(Suit.SLYTHERIN, Rank.TWO)
OPP_THREE = _card(Suit.GRYFFINDOR, Rank.THREE)
OPP_NINE = _card(Suit.RAVENCLAW, Rank.NINE)
PILE = _card(Suit.GRYFFINDOR, Rank.FIVE, "pile")
DECK_TOP = _card(Suit.HUFFLEPUFF, Rank.FOUR, "deck")


def _table(
    *,
    player_hand: tuple[Card, ...] = (KING, BLOCKED, WILD),
    opponent_hand: tuple[Card, ...] = (OPP_THREE, OPP_NINE),
    deck: tuple[Card, ...] = (_card(Suit.RAVENCLAW, Rank.TWO, "deck"), DECK_TOP),
    turn: Turn = Turn.PLAYER,
    status: MatchStatus = MatchStatus.PLAYING,
) -> MatchState:
    return MatchState(
        deck=deck,
        player_hand=player_hand,
        opponent_hand=opponent_hand,
        discard_pile=(PILE,),
        current_suit=PILE.suit,
        current_rank=PILE.rank,
        turn=turn,
        status=status,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def orchestrator(scheduler: ManualScheduler) -> TurnOrchestrator:
    orch = TurnOrchestrator(
        MatchConfig(seed=7),
        policy=OpponentPolicy(rng=FixedRandom(0.9)),
        scheduler=scheduler,
    )
    orch.state = _table()
    return orch


def test_fresh_orchestrator_waits_for_the_player(scheduler: ManualScheduler) -> None:
    orch = TurnOrchestrator(MatchConfig(seed=1), scheduler=scheduler)

    snapshot = orch.snapshot()

    assert snapshot.message == WELCOME_MESSAGE
    assert snapshot.turn is Turn.PLAYER
    assert len(snapshot.player_hand) == 8
    assert snapshot.opponent_hand_size == 8
    assert scheduler.calls == []


def test_play_schedules_one_delayed_opponent_turn(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    assert orchestrator.submit_play(KING.id)

    assert orchestrator.state.turn is Turn.OPPONENT
    assert orchestrator.message == "You cast K of Gryffindor. AI is thinking..."
    assert [delay for delay, _, _ in scheduler.calls] == [1.5]
    assert orchestrator.has_pending_opponent_turn

    scheduler.run_pending()

    assert orchestrator.state.turn is Turn.PLAYER
    assert orchestrator.state.discard_head == OPP_THREE
    assert orchestrator.message == "AI cast 3 of Gryffindor. Your turn!"
    assert not orchestrator.has_pending_opponent_turn
    assert scheduler.calls == []


def test_intents_are_rejected_during_opponent_turn(
    orchestrator: TurnOrchestrator, scheduler: ManualScheduler
) -> None:
    orchestrator.submit_play(KING.id)
    before = orchestrator.state

    assert not orchestrator.submit_play(WILD.id)
    assert not orchestrator.submit_draw()
    assert orchestrator.state is before
    assert orchestrator.message == "Wait for your turn."
    assert len(scheduler.calls) == 1


def test_illegal_card_is_rejected_without_changes(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    before = orchestrator.state

    assert not orchestrator.submit_play(BLOCKED.id)
    assert not orchestrator.submit_play("no-such-card")
    assert orchestrator.state is before
    assert orchestrator.message == "That card doesn't match the current House or Rank."
    assert scheduler.calls == []


def test_wild_waits_for_suit_choice_before_scheduling(
    orchestrator: TurnOrchestrator, scheduler: ManualScheduler
) -> None:
    assert orchestrator.submit_play(WILD.id)
    assert orchestrator.state.status is MatchStatus.CHOOSING_SUIT
    assert orchestrator.message == "Wild Magic! Choose a new House (Suit)."
    assert scheduler.calls == []

    assert not orchestrator.submit_draw()
    assert not orchestrator.submit_play(KING.id)

    assert orchestrator.submit_suit_choice("Ravenclaw")
    assert orchestrator.state.current_suit is Suit.RAVENCLAW
    assert orchestrator.state.turn is Turn.OPPONENT
    assert orchestrator.message == "You chose Ravenclaw. AI's turn."
    assert len(scheduler.calls) == 1

    scheduler.run_pending()
    assert orchestrator.state.discard_head == OPP_NINE


def test_suit_choice_without_wild_is_rejected(orchestrator: TurnOrchestrator) -> None:
    assert not orchestrator.submit_suit_choice(Suit.SLYTHERIN)
    assert orchestrator.message == "There is no House to choose right now."


def test_draw_reports_the_card_drawn(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    assert orchestrator.submit_draw()

    assert orchestrator.message == "You drew 4 of Hufflepuff."
    assert orchestrator.state.player_hand[-1] == DECK_TOP
    assert len(scheduler.calls) == 1


def test_draw_on_empty_deck_skips_turn(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    orchestrator.state = _table(deck=())

    assert orchestrator.submit_draw()

    assert orchestrator.message == EMPTY_DECK_MESSAGE
    assert orchestrator.state.player_hand == (KING, BLOCKED, WILD)
    assert orchestrator.state.turn is Turn.OPPONENT
    assert len(scheduler.calls) == 1


def test_new_match_cancels_pending_opponent_turn(
    orchestrator: TurnOrchestrator, scheduler: ManualScheduler
) -> None:
    orchestrator.submit_play(KING.id)
    _, stale_callback, handle = scheduler.calls[0]

    orchestrator.start_new_match()
    fresh = orchestrator.state

    assert handle.cancelled
    assert not orchestrator.has_pending_opponent_turn
    assert fresh.turn is Turn.PLAYER
    assert fresh.status is MatchStatus.PLAYING

    stale_callback()

    assert orchestrator.state is fresh


def test_player_victory_ends_match(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    orchestrator.state = _table(player_hand=(KING,))

    assert orchestrator.submit_play(KING.id)

    assert orchestrator.state.winner is Turn.PLAYER
    assert orchestrator.message == VICTORY_MESSAGE
    assert scheduler.calls == []
    assert not orchestrator.submit_draw()
    assert orchestrator.message == "The match is over. Start a new game."


def test_opponent_victory_reports_defeat(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    orchestrator.state = _table(opponent_hand=(OPP_THREE,))

    orchestrator.submit_play(KING.id)
    scheduler.run_pending()

    assert orchestrator.state.winner is Turn.OPPONENT
    assert orchestrator.message == DEFEAT_MESSAGE


def test_opponent_wild_names_a_house(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    orchestrator.state = _table(
        opponent_hand=(_card(Suit.SLYTHERIN, Rank.EIGHT, "opp"), _card(Suit.HUFFLEPUFF, Rank.TWO, "opp")),
        turn=Turn.OPPONENT,
    )

    action = orchestrator.play_opponent_turn()

    assert isinstance(action, actions.PlayAction)
    assert orchestrator.state.current_suit is Suit.HUFFLEPUFF
    assert orchestrator.state.turn is Turn.PLAYER
    assert orchestrator.message == "AI played an 8 and chose Hufflepuff!"


def test_opponent_fumble_is_announced(scheduler: ManualScheduler) -> None:
    orch = TurnOrchestrator(
        MatchConfig(seed=3),
        policy=OpponentPolicy(rng=FixedRandom(0.0)),
        scheduler=scheduler,
    )
    orch.state = _table(turn=Turn.OPPONENT)

    action = orch.play_opponent_turn()

    assert action == actions.DrawAction(fumble=True)
    assert orch.message == "AI is fumbling with its wand..."
    assert len(orch.state.opponent_hand) == 3


def test_opponent_resolves_pending_suit_choice(orchestrator: TurnOrchestrator) -> None:
    orchestrator.state = _table(
        opponent_hand=(_card(Suit.RAVENCLAW, Rank.ONE, "opp"),),
        turn=Turn.OPPONENT,
        status=MatchStatus.CHOOSING_SUIT,
    )

    assert orchestrator.play_opponent_turn() is None

    assert orchestrator.state.current_suit is Suit.RAVENCLAW
    assert orchestrator.state.status is MatchStatus.PLAYING
    assert orchestrator.state.turn is Turn.PLAYER
    assert orchestrator.message == "AI chose Ravenclaw!"


def test_play_opponent_turn_is_noop_on_player_turn(orchestrator: TurnOrchestrator) -> None:
    before = orchestrator.state

    assert orchestrator.play_opponent_turn() is None
    assert orchestrator.state is before


def test_listeners_receive_snapshots(orchestrator: TurnOrchestrator, scheduler: ManualScheduler) -> None:
    seen: list[MatchSnapshot] = []
    unsubscribe = orchestrator.subscribe(seen.append)

    orchestrator.submit_play(KING.id)
    scheduler.run_pending()
    unsubscribe()
    orchestrator.submit_draw()

    assert [snapshot.turn for snapshot in seen] == [Turn.OPPONENT, Turn.PLAYER]
    assert seen[0].opponent_hand_size == 2
    assert seen[1].opponent_hand_size == 1


def test_opponent_turn_runs_on_event_loop() -> None:
    async def scenario() -> TurnOrchestrator:
        orch = TurnOrchestrator(
            MatchConfig(seed=11, thinking_delay=0.01),
            policy=OpponentPolicy(rng=FixedRandom(0.9)),
        )
        orch.state = _table()
        orch.submit_play(KING.id)
        assert orch.has_pending_opponent_turn
        await asyncio.sleep(0.1)
        return orch

    orch = asyncio.run(scenario())

    assert orch.state.turn is Turn.PLAYER
    assert orch.state.discard_head == OPP_THREE


def test_new_match_on_event_loop_drops_scheduled_turn() -> None:
    async def scenario() -> tuple[TurnOrchestrator, MatchState]:
        orch = TurnOrchestrator(
            MatchConfig(seed=11, thinking_delay=0.01),
            policy=OpponentPolicy(rng=FixedRandom(0.9)),
        )
        orch.state = _table()
        orch.submit_play(KING.id)
        orch.start_new_match()
        fresh = orch.state
        await asyncio.sleep(0.1)
        return orch, fresh

    orch, fresh = asyncio.run(scenario())

    assert orch.state is fresh
    assert orch.state.turn is Turn.PLAYER


def test_inline_scheduler_keeps_opponent_moving() -> None:
    scheduler = ImmediateScheduler()
    orch = TurnOrchestrator(
        MatchConfig(seed=2, thinking_delay=0.0),
        policy=OpponentPolicy(rng=FixedRandom(0.9)),
        scheduler=scheduler,
    )
    orch.state = _table(
        player_hand=(KING, _card(Suit.GRYFFINDOR, Rank.ACE), BLOCKED),
        opponent_hand=(OPP_THREE, _card(Suit.GRYFFINDOR, Rank.SIX, "opp"), OPP_NINE),
    )

    assert orch.submit_play(KING.id)
    assert orch.state.turn is Turn.PLAYER
    assert not orch.has_pending_opponent_turn

    assert orch.submit_play("Gryffindor-A-a")
    assert orch.state.turn is Turn.PLAYER
    assert not orch.has_pending_opponent_turn
    assert scheduler.calls == 2
    assert len(orch.state.opponent_hand) == 1
