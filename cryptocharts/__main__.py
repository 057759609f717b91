from __future__ import annotations

import argparse
import logging
import sys

from cryptocharts.adapters.ledger_client import LedgerClient
from cryptocharts.adapters.price_client import PriceClient
from cryptocharts.core.scheduler import RefreshScheduler
from cryptocharts.core.settings import get_settings
from cryptocharts.core.setup import DeferredSetup
from cryptocharts.core.snapshot import SnapshotBuilder


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="cryptocharts", description="Print the current crypto net worth.")
    parser.add_argument("--setup-file", default=settings.setup_file, help="holdings JSON (default: %(default)s)")
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    setup = DeferredSetup.load(args.setup_file)
    with (
        PriceClient(settings.price_api_url, timeout_seconds=settings.http_timeout_seconds,
                    user_agent=settings.user_agent) as prices,
        LedgerClient(settings.ledger_api_url, timeout_seconds=settings.http_timeout_seconds,
                     user_agent=settings.user_agent) as ledger,
        RefreshScheduler(SnapshotBuilder(setup, prices, ledger).run_cycle,
                         interval_seconds=settings.refresh_interval_seconds) as scheduler,
    ):
        outcome = scheduler.current_outcome()

    if outcome.snapshot is None:
        print(outcome.trace, file=sys.stderr)
    else:
        print(outcome.snapshot.render())


if __name__ == "__main__":
    main()
