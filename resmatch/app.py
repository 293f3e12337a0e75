from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from . import jobs, triggers
from .auth.dependencies import require_cron_token
from .config import DEFAULT_ENGINE_CONFIG
from .dates import parse_date
from .engine.stats import popularity_report
from .log import setup_logging
from .models import BucketEvent, HotnessEvent
from .notify.base import Notifier
from .runtime import get_notifier, get_store
from .store.base import Store

setup_logging(DEFAULT_ENGINE_CONFIG.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Reservation Matching Engine", version="1.0.0")


def _resolve_now(now: str | None) -> datetime:
    if not now:
        return datetime.now()
    try:
        return parse_date(now)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"now must look like 2024/01/31 18:30, got {now!r}") from None


def _run_job(name: str, job: Callable[[], Any]) -> PlainTextResponse:
    """Run a scheduled unit; 200 "OK" on success, the raw error text otherwise."""
    try:
        result = job()
    except Exception as exc:
        logger.error("%s finished with error", name, exc_info=True)
        return PlainTextResponse(str(exc), status_code=500)
    logger.info("%s successfully finished: %s", name, result)
    return PlainTextResponse("OK")


def _accepted(result: Any) -> JSONResponse:
    return JSONResponse({"status": "accepted", "result": result}, status_code=202)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/statistics/popular")
def popular(
    limit: int = Query(default=10, ge=1, le=100),
    store: Store = Depends(get_store),
) -> dict:
    return popularity_report(store, limit)


# ── Scheduled jobs ───────────────────────────────────────────────────────


@app.post("/cron/archive-reservations", dependencies=[Depends(require_cron_token)])
def archive_reservations_cron(
    now: str | None = None,
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> PlainTextResponse:
    at = _resolve_now(now)
    return _run_job(
        "moveReservationsToHistoryCron",
        lambda: jobs.archive_reservations(at, store, notifier),
    )


@app.post("/cron/archive-notification-requests", dependencies=[Depends(require_cron_token)])
def archive_notification_requests_cron(
    now: str | None = None,
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> PlainTextResponse:
    at = _resolve_now(now)
    return _run_job(
        "moveNotificationRequestsToHistoryCron",
        lambda: jobs.archive_notification_requests(at, store, notifier),
    )


@app.post("/cron/daily-statistics", dependencies=[Depends(require_cron_token)])
def daily_statistics_cron(
    now: str | None = None,
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> PlainTextResponse:
    at = _resolve_now(now)
    return _run_job(
        "dailyStatisticsCron",
        lambda: jobs.run_daily_statistics(at, store, notifier),
    )


@app.post("/cron/star-decay", dependencies=[Depends(require_cron_token)])
def star_decay_cron(now: str | None = None, store: Store = Depends(get_store)) -> PlainTextResponse:
    at = _resolve_now(now)
    return _run_job("starDecayCron", lambda: jobs.decay_stars(at, store))


@app.post("/cron/reset-upload-quotas", dependencies=[Depends(require_cron_token)])
def reset_upload_quotas_cron(store: Store = Depends(get_store)) -> PlainTextResponse:
    return _run_job("resetUploadQuotasCron", lambda: jobs.reset_upload_quotas(store))


# ── Database events ──────────────────────────────────────────────────────


@app.post("/events/reservations/{key}")
def reservation_created(
    key: str,
    record: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> JSONResponse:
    return _accepted(triggers.on_reservation_created(key, record, store, notifier))


@app.post("/events/notification-requests/{key}")
def notification_request_created(
    key: str,
    record: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> JSONResponse:
    return _accepted(triggers.on_request_created(key, record, store, notifier))


@app.post("/events/picked-reservations/{key}")
def reservation_picked(
    key: str,
    record: dict[str, Any] = Body(...),
    notifier: Notifier = Depends(get_notifier),
) -> JSONResponse:
    return _accepted(triggers.on_reservation_picked(key, record, notifier))


@app.post("/events/reviews")
def review_created(body: BucketEvent, store: Store = Depends(get_store)) -> JSONResponse:
    return _accepted(triggers.on_review_created(body.restaurant, body.day, body.slot, store))


@app.post("/events/statistics/hotness")
def bucket_hotness_written(body: HotnessEvent, store: Store = Depends(get_store)) -> JSONResponse:
    return _accepted(
        triggers.on_bucket_hotness_written(body.restaurant, body.day, body.slot, body.hotness, store)
    )
