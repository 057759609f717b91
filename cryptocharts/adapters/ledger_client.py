# cryptocharts/adapters/ledger_client.py
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from cryptocharts.adapters.http import JsonApiClient, NotFound
from cryptocharts.core.errors import ProtocolError

NATIVE_ASSET_TYPE = "native"


class LedgerClient(JsonApiClient):
    """Stellar Horizon account lookups, used for holdings whose amount lives on-chain."""

    service_name = "Ledger API"

    def list_balances(self, account_id: str) -> list[dict[str, Any]]:
        try:
            raw = self._get_json(f"/accounts/{quote(account_id, safe='')}")
        except NotFound as e:
            raise ProtocolError(f"Ledger account '{account_id}' not found") from e  # noqa: TRY003

        if isinstance(raw, list):
            return [dict(x) for x in raw if isinstance(x, Mapping)]

        if isinstance(raw, Mapping):
            maybe = raw.get("balances")
            if isinstance(maybe, list):
                return [dict(x) for x in maybe if isinstance(x, Mapping)]

        raise ProtocolError(f"Unexpected ledger response for '{account_id}': {raw!r}")  # noqa: TRY003

    def native_balance(self, account_id: str) -> float:
        for entry in self.list_balances(account_id):
            if entry.get("asset_type") != NATIVE_ASSET_TYPE:
                continue
            raw = entry.get("balance")
            try:
                balance = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError) as e:
                raise ProtocolError(f"Native balance of '{account_id}' is not numeric: {raw!r}") from e  # noqa: TRY003
            if math.isnan(balance) or math.isinf(balance) or balance < 0:
                raise ProtocolError(f"Native balance of '{account_id}' is out of range: {raw!r}")  # noqa: TRY003
            return balance
        raise ProtocolError(f"Ledger account '{account_id}' has no native balance entry")  # noqa: TRY003
