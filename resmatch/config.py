from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


HOTNESS_MODES = ("single_pass", "incremental")


@dataclass(frozen=True)
class EngineConfig:
    # Backends
    store_backend: str = os.getenv("RESMATCH_STORE", "memory")
    firebase_credentials: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    firebase_database_url: str = os.getenv("FIREBASE_DATABASE_URL", "")
    cron_token: str = os.getenv("RESMATCH_CRON_TOKEN", "")
    max_workers: int = int(os.getenv("RESMATCH_MAX_WORKERS", "8"))
    log_level: str = os.getenv("RESMATCH_LOG_LEVEL", "INFO")

    # Matching
    flexible_window_hours: int = 2
    exclude_self_matches: bool = _env_flag("RESMATCH_EXCLUDE_SELF_MATCHES", True)

    # Hot reservations
    hot_threshold: int = 7
    exclude_owner_from_hot: bool = _env_flag("RESMATCH_EXCLUDE_OWNER_FROM_HOT", True)

    # Archiving
    reservation_lookahead_hours: int = 4
    request_archive_offset_hours: int = int(
        os.getenv("RESMATCH_REQUEST_ARCHIVE_OFFSET_HOURS", "-2")
    )

    # Statistics / hotness
    exclude_spam: bool = _env_flag("RESMATCH_EXCLUDE_SPAM", True)
    hotness_mode: str = os.getenv("RESMATCH_HOTNESS_MODE", "single_pass")

    # User maintenance
    star_decay_days: int = int(os.getenv("RESMATCH_STAR_DECAY_DAYS", "30"))

    def __post_init__(self) -> None:
        if self.hotness_mode not in HOTNESS_MODES:
            raise ValueError(
                f"RESMATCH_HOTNESS_MODE must be one of {', '.join(HOTNESS_MODES)}, got {self.hotness_mode!r}"
            )


DEFAULT_ENGINE_CONFIG = EngineConfig()
