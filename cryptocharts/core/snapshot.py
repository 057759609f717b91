from __future__ import annotations

import logging
import time

from cryptocharts.adapters.ledger_client import LedgerClient
from cryptocharts.adapters.price_client import PriceClient
from cryptocharts.core.models import (
    AmountSource,
    CurrencyLine,
    LedgerAmount,
    Snapshot,
    StaticAmount,
)
from cryptocharts.core.outcome import FetchOutcome
from cryptocharts.core.setup import DeferredSetup

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """Runs one fetch cycle: price every holding and aggregate net worth."""

    def __init__(self, setup: DeferredSetup, prices: PriceClient, ledger: LedgerClient) -> None:
        self.setup = setup
        self.prices = prices
        self.ledger = ledger

    def _effective_amount(self, source: AmountSource) -> float:
        match source:
            case StaticAmount(amount=amount):
                return amount
            case LedgerAmount(account_id=account_id):
                return self.ledger.native_balance(account_id)
        raise TypeError(f"Unknown amount source: {source!r}")  # noqa: TRY003

    def build(self) -> Snapshot:
        # Raises the deferred startup failure, if any, before touching the network
        holdings = self.setup.holdings()
        currency = holdings.local_currency

        lines: list[CurrencyLine] = []
        for asset in holdings.owned_assets:
            record = self.prices.fetch_price(asset.asset_id, currency)
            amount = self._effective_amount(asset.amount_source)
            lines.append(CurrencyLine(record=record, amount=amount))

        return Snapshot(lines=tuple(lines), local_currency=currency, fetched_at=int(time.time()))

    def run_cycle(self) -> FetchOutcome:
        started = time.perf_counter()
        try:
            snapshot = self.build()
        except Exception as e:  # noqa: BLE001
            logger.exception("Fetch cycle failed: %s", e)
            return FetchOutcome.failure(e)
        logger.info(
            "Fetch cycle completed: %d holdings, total %s (%.0f ms)",
            len(snapshot.lines),
            snapshot.local_currency.format(snapshot.total_net_worth),
            (time.perf_counter() - started) * 1000,
        )
        return FetchOutcome.success(snapshot)
