# cryptocharts/adapters/price_client.py
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from cryptocharts.adapters.http import JsonApiClient, NotFound
from cryptocharts.core.errors import ProtocolError
from cryptocharts.core.models import LocalCurrency, PriceRecord

logger = logging.getLogger(__name__)


def _parse_price(entry: Mapping[str, Any], field: str) -> float:
    raw = entry.get(field)
    if raw is None:
        raise ProtocolError(f"Ticker entry has no '{field}' field")  # noqa: TRY003
    try:
        price = float(raw)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Ticker field '{field}' is not numeric: {raw!r}") from e  # noqa: TRY003
    if math.isnan(price) or math.isinf(price) or price < 0:
        raise ProtocolError(f"Ticker field '{field}' is out of range: {raw!r}")  # noqa: TRY003
    return price


class PriceClient(JsonApiClient):
    """
    CoinMarketCap v1 ticker client:
      GET /ticker/{asset_id}/?convert={CODE}  ->  [ { ..., "price_{code}": "123.4" } ]
    """

    service_name = "Price API"

    def fetch_price(self, asset_id: str, currency: LocalCurrency) -> PriceRecord:
        try:
            raw = self._get_json(f"/ticker/{quote(asset_id, safe='')}/", params={"convert": currency.query_code})
        except NotFound:
            logger.warning("Asset %s is not listed by the price API; valuing it at 0", asset_id)
            return PriceRecord(id=asset_id, name=asset_id, price=0.0)

        if not isinstance(raw, list) or len(raw) != 1 or not isinstance(raw[0], Mapping):
            raise ProtocolError(f"Unexpected response for '{asset_id}': {raw!r}")  # noqa: TRY003

        entry: dict[str, Any] = dict(raw[0])
        price = _parse_price(entry, f"price_{currency.field_code}")
        entry.setdefault("id", asset_id)
        entry["price"] = price
        try:
            return PriceRecord.model_validate(entry)
        except ValidationError as e:
            raise ProtocolError(f"Malformed ticker entry for '{asset_id}': {e}") from e  # noqa: TRY003
