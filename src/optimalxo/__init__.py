"""optimalxo package exposing board rules, the minimax engine, and the web app."""

from .ai import MinimaxAI, best_action
from .game import Action, Board, IllegalMoveError, IllegalStateError, Mark, Outcome
from .ui import app

__all__ = [
    "Action",
    "Board",
    "IllegalMoveError",
    "IllegalStateError",
    "Mark",
    "MinimaxAI",
    "Outcome",
    "app",
    "best_action",
]
