from fastapi.testclient import TestClient

from cryptocharts.api.app import app


def test_health_ok():
    client = TestClient(app)  # type: ignore  # noqa: PGH003
    r = client.get("/health")
    assert r.status_code == 200  # noqa: PLR2004
    body = r.json()
    assert {"name", "version", "time"} <= body.keys()
