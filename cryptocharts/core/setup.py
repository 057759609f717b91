from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from cryptocharts.core.errors import ConfigLoadError
from cryptocharts.core.models import HoldingsConfig

logger = logging.getLogger(__name__)


def load_holdings(path: str | Path) -> HoldingsConfig:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read setup file '{p}': {e}") from e  # noqa: TRY003
    try:
        return HoldingsConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"Malformed setup file '{p}': {e}") from e  # noqa: TRY003


class DeferredSetup:
    """
    Holds the outcome of loading the holdings file at startup.

    Loading never raises here. A failure is kept and handed to the first fetch
    cycle that asks for the holdings, so the consumer sees it through the same
    channel as any network error. The replay happens once; afterwards each
    cycle retries loading from the same path until it succeeds.
    """

    def __init__(self, path: str | Path, config: HoldingsConfig | None = None,
                 failure: ConfigLoadError | None = None) -> None:
        self.path = Path(path)
        self._config = config
        self._failure = failure
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: str | Path) -> DeferredSetup:
        try:
            config = load_holdings(path)
        except ConfigLoadError as e:
            logger.warning("Setup load failed, deferring to first fetch: %s", e)
            return cls(path, failure=e)
        logger.info("Loaded %d holdings from %s", len(config.owned_assets), path)
        return cls(path, config=config)

    @classmethod
    def of(cls, config: HoldingsConfig) -> DeferredSetup:
        return cls("<memory>", config=config)

    @property
    def pending_failure(self) -> ConfigLoadError | None:
        with self._lock:
            return self._failure

    def holdings(self) -> HoldingsConfig:
        with self._lock:
            if self._failure is not None:
                failure, self._failure = self._failure, None
                raise failure
            if self._config is None:
                # Raises a fresh ConfigLoadError for this cycle only
                self._config = load_holdings(self.path)
                logger.info("Loaded %d holdings from %s", len(self._config.owned_assets), self.path)
            return self._config
