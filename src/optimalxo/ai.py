"""Exhaustive minimax search for 3x3 tic-tac-toe."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Tuple

from .game import Action, Board, IllegalStateError, Mark

logger = logging.getLogger(__name__)


# ---- value functions ----


def _search(board: Board, maximizing: bool) -> Tuple[int, int]:
    """Return ``(value, nodes)``; ``nodes`` counts every board visited."""
    if board.is_terminal():
        return board.utility(), 1
    nodes = 1
    values = []
    for a in board.allowed_actions():
        value, visited = _search(board.apply(a), not maximizing)
        values.append(value)
        nodes += visited
    return (max(values) if maximizing else min(values)), nodes


def max_value(board: Board) -> int:
    """Best utility X can force from ``board``."""
    return _search(board, True)[0]


def min_value(board: Board) -> int:
    """Best utility O can force from ``board``."""
    return _search(board, False)[0]


# ---- move selection ----


def _best_action(board: Board) -> Tuple[Action, int]:
    if board.is_terminal():
        raise IllegalStateError("No action is available on a finished board")

    maximizing = board.next_player() is Mark.FIRST
    first, *rest = board.allowed_actions()
    # The reply is searched from the opponent's side
    best_score, nodes = _search(board.apply(first), not maximizing)
    best = first
    for action in rest:
        score, visited = _search(board.apply(action), not maximizing)
        nodes += visited
        if (score > best_score) if maximizing else (score < best_score):
            best, best_score = action, score
    return best, nodes


def best_action(board: Board) -> Action:
    """Optimal action for the side to move.

    Actions are scanned in :meth:`Board.allowed_actions` order and the first
    one to strictly improve on the running best is kept, so among equally good
    moves the earliest in row-major order wins.
    """
    return _best_action(board)[0]


# ---- player ----


@dataclass
class MinimaxAI:
    """Engine-controlled player.

    ``choose(board)`` returns the optimal action for ``player`` and keeps the
    number of boards the last search visited in ``nodes_evaluated``.
    """

    player: Mark = Mark.SECOND
    nodes_evaluated: int = field(default=0, init=False)

    def choose(self, board: Board) -> Action:
        if board.is_terminal():
            raise IllegalStateError("Game already finished")
        if board.next_player() is not self.player:
            raise IllegalStateError("It is not this AI player's turn")

        action, self.nodes_evaluated = _best_action(board)
        logger.debug(
            "%s plays %s after visiting %d positions",
            self.player.value,
            tuple(action),
            self.nodes_evaluated,
        )
        return action
