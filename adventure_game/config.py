"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_PATH = Path("data") / "adventure.db"


@dataclass
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        port = env.get("ADVENTURE_PORT", "5000")
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"ADVENTURE_PORT must be an integer, got {port!r}") from None
        return cls(
            db_path=Path(env.get("ADVENTURE_DB_PATH", str(DEFAULT_DB_PATH))),
            host=env.get("ADVENTURE_HOST", "127.0.0.1"),
            port=port_number,
            log_level=env.get("ADVENTURE_LOG_LEVEL", "INFO").upper(),
        )
