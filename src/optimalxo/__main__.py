"""Entry point for running optimalxo via ``python -m optimalxo``."""

from __future__ import annotations

import uvicorn

from . import ui
from .config import Settings
from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe page."""

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    ui.AI_THINK_DELAY = settings.ai_delay
    uvicorn.run(
        "optimalxo.ui:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
