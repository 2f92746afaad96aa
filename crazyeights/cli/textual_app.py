"""Textual-powered interactive Crazy Eights interface."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.logging import TextualHandler
from textual.reactive import reactive
from textual.widgets import Footer, Header, OptionList, Static
from textual.widgets.option_list import Option

from .. import actions
from ..cards import SUIT_THEMES, Suit
from ..logging_utils import setup_logging
from ..orchestrator import TurnOrchestrator
from ..state import MatchConfig, MatchSnapshot, MatchStatus, Turn
from .render import describe_card, format_suit, render_snapshot

MAX_EVENT_LINES = 18


class EventLog(Static):
    """Simple rolling log of narration messages."""

    lines: reactive[tuple[str, ...]] = reactive((), init=False)

    def on_mount(self) -> None:  # pragma: no cover - widget lifecycle glue
        self._refresh()

    def add(self, message: str) -> None:
        if not message:
            return
        self.lines = (self.lines + (message,))[-MAX_EVENT_LINES:]

    def watch_lines(self, value: tuple[str, ...]) -> None:
        self._refresh(value)

    def _refresh(self, lines: tuple[str, ...] | None = None) -> None:
        content = Table.grid(padding=(0, 1))
        content.add_column(justify="left")
        rows = lines if lines is not None else self.lines
        if rows:
            for line in rows:
                content.add_row(Text(line))
        else:
            content.add_row(Text.from_markup("[dim]Event log will appear here[/dim]"))
        self.update(Panel(content, title="Events", border_style="magenta"))


class StatusStrip(Static):
    """Single line status helper."""

    message: reactive[str] = reactive("", init=False)

    def watch_message(self, value: str) -> None:
        self.update(Panel(Text(value or "Ready"), border_style="green"))


class EightsTextualApp(App):
    """Textual UI that renders snapshots and forwards intents to the orchestrator."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #main {
        layout: horizontal;
        height: 1fr;
    }

    #left {
        width: 2fr;
        padding: 0 1;
    }

    #right {
        width: 1fr;
        padding: 0 1;
    }

    #actions {
        border: heavy $accent;
        height: auto;
        max-height: 16;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("n", "new_game", "New game"),
        Binding("d", "draw", "Draw"),
    ]

    def __init__(self, config: MatchConfig) -> None:
        super().__init__()
        self.orchestrator = TurnOrchestrator(config)
        self._unsubscribe = None
        self.status_strip: StatusStrip | None = None
        self.table_panel: Static | None = None
        self.action_list: OptionList | None = None
        self.event_log: EventLog | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        self.status_strip = StatusStrip(id="status")
        yield self.status_strip

        self.table_panel = Static(id="table")
        self.action_list = OptionList(id="actions")
        self.event_log = EventLog(id="events")
        yield Horizontal(
            Vertical(self.table_panel, self.action_list, id="left"),
            Vertical(self.event_log, id="right"),
            id="main",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Crazy Eights"
        self._unsubscribe = self.orchestrator.subscribe(self._show)
        self._show(self.orchestrator.snapshot())

    def on_unmount(self) -> None:
        self.orchestrator.close()
        if self._unsubscribe is not None:
            self._unsubscribe()

    def action_new_game(self) -> None:
        if self.event_log:
            self.event_log.lines = ()
        self.orchestrator.start_new_match()

    def action_draw(self) -> None:
        self.orchestrator.submit_draw()

    @on(OptionList.OptionSelected, "#actions")
    def _on_action_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        option_id = event.option.id
        if option_id is None:
            return
        kind, _, value = option_id.partition(":")
        if kind == "play":
            self.orchestrator.submit_play(value)
        elif kind == "suit":
            self.orchestrator.submit_suit_choice(value)
        elif kind == "draw":
            self.orchestrator.submit_draw()
        elif kind == "new":
            self.action_new_game()

    def _show(self, snapshot: MatchSnapshot) -> None:
        if self.table_panel:
            self.table_panel.update(render_snapshot(snapshot))
        if self.event_log:
            self.event_log.add(snapshot.message)
        if self.status_strip:
            self.status_strip.message = snapshot.message
        self._rebuild_actions(snapshot)

    def _rebuild_actions(self, snapshot: MatchSnapshot) -> None:
        if self.action_list is None:
            return
        self.action_list.clear_options()
        if snapshot.status is MatchStatus.GAME_OVER:
            self.action_list.add_options([Option("[bold]Start a new game[/bold]", id="new")])
        elif snapshot.turn is not Turn.PLAYER:
            self.action_list.add_options([Option("[dim]AI is thinking…[/dim]", id="wait", disabled=True)])
        elif snapshot.status is MatchStatus.CHOOSING_SUIT:
            self.action_list.add_options(
                [Option(f"Invoke {format_suit(suit)}", id=f"suit:{suit.value}") for suit in Suit]
            )
        else:
            playable = {
                action.card_id
                for action in actions.legal_actions(self.orchestrator.state, Turn.PLAYER)
                if isinstance(action, actions.PlayAction)
            }
            options = [
                Option(
                    describe_card(card),
                    id=f"play:{card.id}",
                    disabled=card.id not in playable,
                )
                for card in snapshot.player_hand
            ]
            deck_label = "Draw from deck" if snapshot.deck_remaining else "Skip turn (deck empty)"
            options.append(Option(f"[bold]{deck_label}[/bold]", id="draw"))
            self.action_list.add_options(options)
        self.action_list.focus()
        self.sub_title = f"Match {SUIT_THEMES[snapshot.current_suit].name} or {snapshot.current_rank.value}"


def run_textual_app(config: MatchConfig, *, log_level: str | None = None) -> None:
    """Launch the Textual UI."""

    setup_logging(log_level, handler=TextualHandler())
    app = EightsTextualApp(config)
    app.run()
