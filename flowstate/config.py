# flowstate/config.py

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# ---------------- ENV ----------------
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))

DEFAULT_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "https://flowstate-1.onrender.com",
)

SEED_MODES = ("sample", "empty")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _split_origins(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    tasks_file: Path = Path("data") / "tasks.json"
    seed_mode: str = "sample"
    strict_storage: bool = False
    environment: str = "development"
    cors_origins: tuple[str, ...] = DEFAULT_ORIGINS
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    version: str = "1.0.0"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def load_settings() -> Settings:
    """Build Settings from the process environment (and .env, if present)."""
    seed_mode = os.getenv("TASKS_SEED", "sample").strip().lower()
    if seed_mode not in SEED_MODES:
        raise RuntimeError(f"TASKS_SEED must be one of {SEED_MODES}, got {seed_mode!r}")

    origins = list(DEFAULT_ORIGINS)
    for origin in _split_origins(os.getenv("FRONTEND_ORIGINS")) + _split_origins(os.getenv("FRONTEND_URL")):
        if origin not in origins:
            origins.append(origin)

    environment = os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV") or "development"

    return Settings(
        tasks_file=Path(os.getenv("TASKS_FILE", os.path.join("data", "tasks.json"))),
        seed_mode=seed_mode,
        strict_storage=_env_flag("TASKS_STRICT_STORAGE"),
        environment=environment.strip().lower(),
        cors_origins=tuple(origins),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
