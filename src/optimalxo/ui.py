"""FastAPI-powered web page for playing tic-tac-toe against the engine."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator, model_validator

from .ai import MinimaxAI
from .game import (
    Action,
    Board,
    GameError,
    IllegalMoveError,
    Mark,
    Outcome,
    parse_cell_id,
)

logger = logging.getLogger(__name__)


HUMAN: Mark = Mark.FIRST
AI_THINK_DELAY: float = 0.3

RESULT_TEXT: Dict[Outcome, str] = {
    Outcome.FIRST_WINS: "Won X",
    Outcome.SECOND_WINS: "Won O",
    Outcome.TIE: "Tie",
}


@dataclass
class GameSession:
    """The current board of one browser game and its engine opponent."""

    board: Board = field(default_factory=Board)
    ai: MinimaxAI = field(default_factory=lambda: MinimaxAI(player=HUMAN.opponent()))
    move_log: List[Dict[str, object]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on restart so a stale engine task leaves the new game alone
    generation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="optimalxo", description="Tic-tac-toe against a minimax engine")


class MoveRequest(BaseModel):
    """A human move, as row/col indices or a two-digit cell identifier."""

    row: Optional[int] = Field(default=None, ge=0, le=2)
    col: Optional[int] = Field(default=None, ge=0, le=2)
    cell: Optional[str] = Field(default=None, description='Grid cell id, e.g. "02"')

    @field_validator("cell")
    @classmethod
    def ensure_cell_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            parse_cell_id(value)
        except GameError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @model_validator(mode="after")
    def ensure_single_target(self) -> "MoveRequest":
        has_coords = self.row is not None and self.col is not None
        if self.cell is None and not has_coords:
            raise ValueError("Provide either row and col, or cell")
        if self.cell is not None and (self.row is not None or self.col is not None):
            raise ValueError("Provide either row and col, or cell, not both")
        return self

    def action(self) -> Action:
        if self.cell is not None:
            return parse_cell_id(self.cell)
        if self.row is None or self.col is None:
            raise IllegalMoveError("Provide either row and col, or cell")
        return Action(self.row, self.col)


def _create_session() -> Tuple[str, GameSession]:
    session = GameSession()
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s", session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str, generation: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        if session.generation != generation:
            return
        try:
            board = session.board
            if board.is_terminal() or board.next_player() is not session.ai.player:
                return
            action = session.ai.choose(board)
            session.board = board.apply(action)
            session.move_log.append(
                {
                    "player": session.ai.player.value,
                    "row": action.row,
                    "col": action.col,
                }
            )
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        outcome = board.outcome()
        winner = board.winner()
        allowed = [] if board.is_terminal() else board.allowed_actions()
        state: Dict[str, object] = {
            "id": game_id,
            "board": [[c.strip() for c in row] for row in board.rows()],
            "nextPlayer": board.next_player().value,
            "allowedActions": [list(a) for a in allowed],
            "terminal": board.is_terminal(),
            "winner": winner.value if winner else None,
            "outcome": outcome.value,
            "utility": board.utility(),
            "result": RESULT_TEXT.get(outcome),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    action: Action,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        board = session.board
        if board.is_terminal():
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if board.next_player() is not HUMAN:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            session.board = board.apply(action)
        except GameError as exc:
            logger.info("Rejected move %s in game %s: %s", tuple(action), game_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append(
            {"player": HUMAN.value, "row": action.row, "col": action.col}
        )

        should_schedule_ai = not session.board.is_terminal()
        if should_schedule_ai:
            session.ai_pending = True
        generation = session.generation

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, generation)


@app.post("/api/game")
def create_game() -> Dict[str, object]:
    game_id, session = _create_session()
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.action(), background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.board = Board.empty()
        session.move_log.clear()
        session.ai_pending = False
        session.generation += 1
    logger.info("Restarted game %s", game_id)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>optimalxo</title>
    <style>
      body {
        font-family: system-ui, sans-serif;
        display: flex;
        flex-direction: column;
        align-items: center;
        margin-top: 3rem;
        background: #f4f4f8;
      }
      table { border-collapse: collapse; }
      td {
        width: 96px;
        height: 96px;
        border: 2px solid #333;
        text-align: center;
        font-size: 3rem;
        cursor: pointer;
      }
      #end-game-section {
        display: none;
        flex-direction: column;
        align-items: center;
        margin-top: 1.5rem;
      }
      .result { font-size: 1.5rem; font-weight: 600; }
    </style>
  </head>
  <body>
    <h1>Tic-tac-toe</h1>
    <table id=\"board\">
      <tr><td id=\"00\"></td><td id=\"01\"></td><td id=\"02\"></td></tr>
      <tr><td id=\"10\"></td><td id=\"11\"></td><td id=\"12\"></td></tr>
      <tr><td id=\"20\"></td><td id=\"21\"></td><td id=\"22\"></td></tr>
    </table>
    <section id=\"end-game-section\">
      <span class=\"result\"></span>
      <button class=\"restart-game\">Restart</button>
    </section>
    <script>
      let gameId = null;
      let state = null;
      const endGame = document.getElementById("end-game-section");
      const resultEl = endGame.querySelector(".result");

      function render(next) {
        state = next;
        for (let i = 0; i < 3; i++) {
          for (let j = 0; j < 3; j++) {
            document.getElementById(`${i}${j}`).innerText = state.board[i][j];
          }
        }
        if (state.result) {
          resultEl.innerText = state.result;
          endGame.style.display = "flex";
        } else {
          endGame.style.display = "none";
        }
        if (state.aiPending) {
          setTimeout(refresh, 150);
        }
      }

      async function call(method, url, body) {
        const response = await fetch(url, {
          method,
          headers: { "Content-Type": "application/json" },
          body: body ? JSON.stringify(body) : undefined,
        });
        if (!response.ok) return null;
        return response.json();
      }

      async function refresh() {
        const next = await call("GET", `/api/game/${gameId}`);
        if (next) render(next);
      }

      async function onCell(event) {
        if (!state || state.terminal || state.aiPending) return;
        if (state.nextPlayer !== "X" || event.target.innerText) return;
        const next = await call("POST", `/api/game/${gameId}/move`, {
          cell: event.target.id,
        });
        if (next) render(next);
      }

      async function restart() {
        const next = await call("POST", `/api/game/${gameId}/restart`);
        if (next) render(next);
      }

      for (const cell of document.querySelectorAll("#board td")) {
        cell.onclick = onCell;
      }
      endGame.querySelector(".restart-game").onclick = restart;

      call("POST", "/api/game").then((created) => {
        gameId = created.id;
        render(created);
      });
    </script>
  </body>
</html>
"""
