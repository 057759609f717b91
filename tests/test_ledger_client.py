import httpx
import pytest

from cryptocharts.adapters.ledger_client import LedgerClient
from cryptocharts.core.errors import ProtocolError, TransportError

ACCOUNT = "GABCDEFSTELLARACCOUNT"


def _client(handler) -> LedgerClient:
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="https://ledger.test")
    return LedgerClient("https://ledger.test", http_client=http)


def test_native_balance_from_horizon_account():
    payload = {
        "id": ACCOUNT,
        "balances": [
            {"balance": "100.0", "asset_type": "credit_alphanum4", "asset_code": "USD"},
            {"balance": "5.5", "asset_type": "native"},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"/accounts/{ACCOUNT}"
        return httpx.Response(200, json=payload)

    assert _client(handler).native_balance(ACCOUNT) == 5.5  # noqa: PLR2004


def test_native_balance_from_bare_list():
    client = _client(lambda request: httpx.Response(200, json=[{"balance": "2", "asset_type": "native"}]))
    assert client.native_balance(ACCOUNT) == 2.0  # noqa: PLR2004


def test_missing_native_entry_is_protocol_error():
    payload = {"balances": [{"balance": "1", "asset_type": "credit_alphanum4"}]}
    client = _client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(ProtocolError, match="no native balance"):
        client.native_balance(ACCOUNT)


def test_unparseable_balance_is_protocol_error():
    payload = {"balances": [{"balance": "lots", "asset_type": "native"}]}
    client = _client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(ProtocolError):
        client.native_balance(ACCOUNT)


def test_unexpected_shape_is_protocol_error():
    client = _client(lambda request: httpx.Response(200, json={"status": "ok"}))
    with pytest.raises(ProtocolError):
        client.list_balances(ACCOUNT)


def test_unknown_account_is_protocol_error():
    client = _client(lambda request: httpx.Response(404, json={"title": "Resource Missing"}))
    with pytest.raises(ProtocolError, match="not found"):
        client.native_balance(ACCOUNT)


def test_gateway_error_is_transport_error():
    client = _client(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(TransportError, match="Ledger API HTTP 502"):
        client.native_balance(ACCOUNT)


def test_infinite_balance_is_protocol_error():
    payload = {"balances": [{"balance": "Infinity", "asset_type": "native"}]}
    client = _client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(ProtocolError, match="out of range"):
        client.native_balance(ACCOUNT)


def test_account_id_cannot_change_request_path():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"balances": [{"balance": "1", "asset_type": "native"}]})

    _client(handler).native_balance("G/../offers?x=1")

    assert seen[0].url.raw_path == b"/accounts/G%2F..%2Foffers%3Fx%3D1"
    assert not seen[0].url.query
