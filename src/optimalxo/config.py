"""Runtime settings read from ``OPTIMALXO_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

ENV_PREFIX = "OPTIMALXO_"


def _read_env_file(path: Path) -> Dict[str, str]:
    """Parse ``KEY=value`` lines; a value may be wrapped in one pair of quotes."""
    if not path.is_file():
        return {}
    parsed: Dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = raw.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        parsed[key.strip()] = value
    return parsed


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Pause before the engine replies, matching the browser page's pacing
    ai_delay: float = 0.3

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> "Settings":
        """Load settings; real environment variables win over ``.env`` values."""
        values: Dict[str, str] = dict(_read_env_file(env_file or Path(".env")))
        values.update(os.environ if environ is None else environ)

        def get(name: str, default: str) -> str:
            v = values.get(ENV_PREFIX + name)
            if v is None or not v.strip():
                return default
            return v.strip()

        try:
            port = int(get("PORT", str(cls.port)))
            ai_delay = float(get("AI_DELAY", str(cls.ai_delay)))
        except ValueError as exc:
            raise ValueError(f"Invalid {ENV_PREFIX}* setting: {exc}") from exc
        if ai_delay < 0:
            raise ValueError(f"{ENV_PREFIX}AI_DELAY must not be negative")

        return cls(
            host=get("HOST", cls.host),
            port=port,
            log_level=get("LOG_LEVEL", cls.log_level).upper(),
            ai_delay=ai_delay,
        )
