from __future__ import annotations

import hmac

from fastapi import Header, HTTPException

from ..config import DEFAULT_ENGINE_CONFIG


def require_cron_token(x_cron_token: str | None = Header(default=None)) -> None:
    """Raise 401 unless the scheduler sent the configured ``X-Cron-Token``.

    Open when no token is configured (local runs).
    """
    expected = DEFAULT_ENGINE_CONFIG.cron_token
    if not expected:
        return
    if not x_cron_token or not hmac.compare_digest(x_cron_token, expected):
        raise HTTPException(status_code=401, detail="Invalid cron token")
