import pytest
from fastapi.testclient import TestClient

import cryptocharts.api.app as app_module
from cryptocharts.core.errors import ConfigLoadError, TransportError
from cryptocharts.core.models import CurrencyLine, LocalCurrency, PriceRecord, Snapshot
from cryptocharts.core.outcome import FetchOutcome


class FakeScheduler:
    def __init__(self, outcome: FetchOutcome) -> None:
        self.outcome = outcome
        self.triggered = 0

    def current_outcome(self) -> FetchOutcome:
        return self.outcome

    def trigger_now(self) -> None:
        self.triggered += 1


def _failure(error: Exception) -> FetchOutcome:
    # Give the error a real traceback and cause chain
    try:
        try:
            raise OSError("connection reset by peer")
        except OSError as cause:
            raise error from cause
    except Exception as e:  # noqa: BLE001
        return FetchOutcome.failure(e)


@pytest.fixture
def client():
    # No `with`: the lifespan (and the real scheduler) never starts
    return TestClient(app_module.app)  # type: ignore  # noqa: PGH003


def test_snapshot_ok(client, monkeypatch):
    snapshot = Snapshot(
        lines=(
            CurrencyLine(record=PriceRecord(id="bitcoin", name="Bitcoin", symbol="BTC", rank=1, price=20000), amount=2.0),
            CurrencyLine(record=PriceRecord(id="stellar", name="Stellar", symbol="XLM", rank=9, price=0.1), amount=5.5),
        ),
        local_currency=LocalCurrency(id="usd", symbol="$"),
        fetched_at=1700000000,
    )
    monkeypatch.setattr(app_module, "_scheduler", FakeScheduler(FetchOutcome.success(snapshot)))

    r = client.get("/snapshot")

    assert r.status_code == 200  # noqa: PLR2004
    body = r.json()
    assert body["currency"] == "USD"
    assert body["count"] == 2  # noqa: PLR2004
    assert [line["id"] for line in body["lines"]] == ["bitcoin", "stellar"]
    assert body["lines"][0]["net_worth"] == 40000.0  # noqa: PLR2004
    assert body["lines"][0]["net_worth_display"] == "$40,000.00"
    assert body["total_net_worth"] == pytest.approx(40000.55)
    assert body["total_net_worth_display"] == "$40,000.55"


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (TransportError("Price API network error"), "TransportError"),
        (ConfigLoadError("Cannot read setup file 'setup.json'"), "ConfigLoadError"),
    ],
)
def test_snapshot_failure_is_503_with_trace(client, monkeypatch, error, kind):
    monkeypatch.setattr(app_module, "_scheduler", FakeScheduler(_failure(error)))

    r = client.get("/snapshot")

    assert r.status_code == 503  # noqa: PLR2004
    body = r.json()
    assert body["kind"] == kind
    assert body["message"] == str(error)
    assert "connection reset by peer" in body["trace"]


def test_refresh_triggers_cycle(client, monkeypatch):
    fake = FakeScheduler(FetchOutcome.failure(TransportError("unused")))
    monkeypatch.setattr(app_module, "_scheduler", fake)

    r = client.post("/refresh")

    assert r.status_code == 202  # noqa: PLR2004
    assert fake.triggered == 1
