"""Top-level package for the Crazy Eights game engine."""

from . import actions, cards, opponent, orchestrator, rules, state

__all__ = [
    "actions",
    "cards",
    "opponent",
    "orchestrator",
    "rules",
    "state",
]
