from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cryptocharts.adapters.ledger_client import LedgerClient
from cryptocharts.adapters.price_client import PriceClient
from cryptocharts.core.models import ErrorResponse, HealthResponse, SnapshotResponse
from cryptocharts.core.scheduler import RefreshScheduler
from cryptocharts.core.settings import Settings, get_settings
from cryptocharts.core.setup import DeferredSetup
from cryptocharts.core.snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)

settings: Settings = get_settings()

# Services (one set per process). Setup failures are kept and reported by the first cycle.
_setup = DeferredSetup.load(settings.setup_file)
_prices = PriceClient(
    settings.price_api_url, timeout_seconds=settings.http_timeout_seconds, user_agent=settings.user_agent
)
_ledger = LedgerClient(
    settings.ledger_api_url, timeout_seconds=settings.http_timeout_seconds, user_agent=settings.user_agent
)
_scheduler = RefreshScheduler(
    SnapshotBuilder(_setup, _prices, _ledger).run_cycle,
    interval_seconds=settings.refresh_interval_seconds,
)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    _scheduler.start()
    try:
        yield
    finally:
        _scheduler.shutdown()
        _prices.close()
        _ledger.close()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

def _now_epoch() -> int:
    return int(time.time())

@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(name=settings.app_name, version=settings.app_version, time=_now_epoch())

@app.get(
    "/snapshot",
    response_model=SnapshotResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
)
def snapshot() -> SnapshotResponse | JSONResponse:
    # Sync handler: FastAPI runs it in a threadpool, so blocking on the cycle is fine
    outcome = _scheduler.current_outcome()
    if outcome.snapshot is None:
        body = ErrorResponse(
            kind=outcome.kind or "Error",
            message=outcome.message or "",
            trace=outcome.trace or "",
        )
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())
    return SnapshotResponse.from_snapshot(outcome.snapshot)

@app.post("/refresh", status_code=status.HTTP_202_ACCEPTED)
def refresh() -> dict[str, bool]:
    _scheduler.trigger_now()
    return {"accepted": True}
