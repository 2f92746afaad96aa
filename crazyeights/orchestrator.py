"""Turn orchestration between the human seat and the computer opponent."""

from __future__ import annotations

import asyncio
import logging
import random
from functools import partial
from typing import Callable, Protocol

from . import actions, rules
from .cards import SUIT_THEMES, Suit, format_cards
from .opponent import OpponentPolicy, choose_suit
from .state import MatchConfig, MatchSnapshot, MatchState, MatchStatus, Turn

__all__ = ["Cancellable", "Scheduler", "TurnOrchestrator"]

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to Hogwarts! Prepare your spells."
NEW_MATCH_MESSAGE = "Your turn! Match the suit or rank."
VICTORY_MESSAGE = "Victory! You are the Triwizard Champion!"
DEFEAT_MESSAGE = "Defeat! The AI has outsmarted you."
EMPTY_DECK_MESSAGE = "The deck is empty! Turn skipped."


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run ``callback`` after ``delay`` seconds.

    ``asyncio.AbstractEventLoop`` satisfies this protocol.
    """

    def call_later(self, delay: float, callback: Callable[[], object]) -> Cancellable: ...


Listener = Callable[[MatchSnapshot], None]


class TurnOrchestrator:
    """Holds the current match and drives the opponent between human intents.

    Human intents return ``True`` when accepted. Rejected intents leave the
    match untouched and only update :attr:`message`.
    """

    def __init__(
        self,
        config: MatchConfig | None = None,
        *,
        rng: random.Random | None = None,
        policy: OpponentPolicy | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or MatchConfig()
        self.rng = rng or self.config.make_rng()
        self.policy = policy or OpponentPolicy(fumble_chance=self.config.fumble_chance, rng=self.rng)
        self._scheduler = scheduler
        self._pending: Cancellable | None = None
        self._generation = 0
        self._listeners: list[Listener] = []
        self.state: MatchState = rules.reset_match(self.config, self.rng)
        self.message = WELCOME_MESSAGE

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def snapshot(self) -> MatchSnapshot:
        return MatchSnapshot.from_state(self.state, self.message)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for snapshots; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def has_pending_opponent_turn(self) -> bool:
        return self._pending is not None

    # ------------------------------------------------------------------
    # Human intents
    # ------------------------------------------------------------------
    def start_new_match(self) -> None:
        self.cancel_pending()
        fresh = rules.reset_match(self.config, self.rng)
        logger.info("new match dealt; discard starts with %s", fresh.discard_head.label())
        logger.debug("player hand: %s", format_cards(fresh.player_hand))
        self._commit(fresh, NEW_MATCH_MESSAGE)

    def submit_play(self, card_id: str) -> bool:
        if not self._human_may_act():
            return False
        if self.state.status is MatchStatus.CHOOSING_SUIT:
            return self._reject("a suit choice is pending", "Choose a House before casting again.")
        try:
            card = rules.find_card(self.state, Turn.PLAYER, card_id)
            next_state = rules.apply_play(self.state, Turn.PLAYER, card)
        except rules.IllegalMove as exc:
            return self._reject(str(exc), "That card doesn't match the current House or Rank.")

        if next_state.is_over:
            message = VICTORY_MESSAGE
        elif next_state.status is MatchStatus.CHOOSING_SUIT:
            message = "Wild Magic! Choose a new House (Suit)."
        else:
            message = f"You cast {card.label()}. AI is thinking..."
        self._commit(next_state, message)
        return True

    def submit_draw(self) -> bool:
        if not self._human_may_act():
            return False
        top = self.state.deck[-1] if self.state.deck else None
        try:
            next_state = rules.apply_draw(self.state, Turn.PLAYER)
        except rules.IllegalMove as exc:
            return self._reject(str(exc), "Choose a House before drawing.")
        message = EMPTY_DECK_MESSAGE if top is None else f"You drew {top.rank.value} of {top.suit.value}."
        self._commit(next_state, message)
        return True

    def submit_suit_choice(self, suit: Suit | str) -> bool:
        if self.state.is_over:
            return self._reject("the match is already over", "The match is over. Start a new game.")
        try:
            next_state = rules.apply_suit_choice(self.state, suit, Turn.PLAYER)
        except rules.IllegalMove as exc:
            return self._reject(str(exc), "There is no House to choose right now.")
        name = SUIT_THEMES[next_state.current_suit].name
        self._commit(next_state, f"You chose {name}. AI's turn.")
        return True

    # ------------------------------------------------------------------
    # Opponent turn
    # ------------------------------------------------------------------
    def play_opponent_turn(self) -> actions.Action | None:
        """Run the opponent policy once and apply its action immediately.

        Returns ``None`` when it is not the opponent's move.
        """

        state = self.state
        if state.turn is not Turn.OPPONENT or state.is_over:
            return None
        self.cancel_pending()

        if state.status is MatchStatus.CHOOSING_SUIT:
            suit = choose_suit(state.opponent_hand)
            self._commit(
                rules.apply_suit_choice(state, suit, Turn.OPPONENT),
                f"AI chose {SUIT_THEMES[suit].name}!",
            )
            return None

        action = self.policy.choose_action(state)
        next_state = actions.apply_action(state, Turn.OPPONENT, action)
        self._commit(next_state, self._describe_opponent_action(state, next_state, action))
        return action

    def cancel_pending(self) -> None:
        """Drop any scheduled opponent turn so it can never fire."""

        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
            logger.debug("cancelled pending opponent turn")

    close = cancel_pending

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _human_may_act(self) -> bool:
        if self.state.is_over:
            return self._reject("the match is already over", "The match is over. Start a new game.")
        if self.state.turn is not Turn.PLAYER:
            return self._reject("not the player's turn", "Wait for your turn.")
        return True

    def _reject(self, reason: str, message: str) -> bool:
        logger.info("rejected player intent: %s", reason)
        self.message = message
        self._notify()
        return False

    def _commit(self, next_state: MatchState, message: str) -> None:
        self.state = next_state
        self.message = message
        if next_state.is_over:
            logger.info("match over; winner=%s", next_state.winner.value if next_state.winner else None)
        self._notify()
        self._advance()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _advance(self) -> None:
        state = self.state
        if state.is_over or state.turn is not Turn.OPPONENT or self._pending is not None:
            return
        scheduler = self._scheduler or asyncio.get_running_loop()
        generation = self._generation
        handle = scheduler.call_later(
            self.config.thinking_delay,
            partial(self._fire, generation),
        )
        # A scheduler may run the callback inline; the opponent turn then bumps the generation.
        if self._generation == generation:
            self._pending = handle
            logger.debug("opponent turn scheduled in %.2fs", self.config.thinking_delay)

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._pending = None
        self.play_opponent_turn()

    def _describe_opponent_action(
        self,
        before: MatchState,
        after: MatchState,
        action: actions.Action,
    ) -> str:
        if isinstance(action, actions.DrawAction):
            drew = bool(before.deck)
            if action.fumble:
                return "AI is fumbling with its wand..." if drew else f"AI is fumbling with its wand... {EMPTY_DECK_MESSAGE}"
            return "AI drew a card." if drew else EMPTY_DECK_MESSAGE
        if after.is_over:
            return DEFEAT_MESSAGE
        played = after.discard_head
        if action.suit is not None:
            return f"AI played an 8 and chose {SUIT_THEMES[action.suit].name}!"
        return f"AI cast {played.label()}. Your turn!"
