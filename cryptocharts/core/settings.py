from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    setup_file: str
    refresh_interval_seconds: float
    price_api_url: str
    ledger_api_url: str
    http_timeout_seconds: float
    user_agent: str
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    interval = float(os.getenv("REFRESH_INTERVAL_SECONDS", "600"))
    if interval <= 0:
        raise RuntimeError("REFRESH_INTERVAL_SECONDS must be positive")  # noqa: TRY003
    return Settings(
        app_name=os.getenv("APP_NAME", "cryptocharts"),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        setup_file=os.getenv("SETUP_FILE", "setup.json"),
        refresh_interval_seconds=interval,
        price_api_url=os.getenv("PRICE_API_URL", "https://api.coinmarketcap.com/v1"),
        ledger_api_url=os.getenv("LEDGER_API_URL", "https://horizon.stellar.org"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "20")),
        user_agent=os.getenv("CC_USER_AGENT", "cryptocharts/0.1"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
