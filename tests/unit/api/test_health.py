from fastapi.testclient import TestClient

from src.adapters.kv_store import InMemoryKeyValueStore
from src.main import create_app
from src.utils.config import Settings


def test_health_endpoint_returns_ok_and_version():
    client = TestClient(create_app(store=InMemoryKeyValueStore()))
    res = client.get("/health")
    assert res.status_code == 200
    data = res.json()
    assert data["ok"] is True
    assert isinstance(data["version"], str) and data["version"]
    assert data["checks"]["config"] is True
    assert data["checks"]["store"] is True
    assert data["checks"]["store_backend"] == "InMemoryKeyValueStore"


def test_lifespan_builds_memory_store_from_settings():
    app = create_app(settings=Settings(STORE_BACKEND="memory"))
    assert app.state.store is None

    with TestClient(app) as client:
        assert isinstance(app.state.store, InMemoryKeyValueStore)
        assert client.get("/badgen/x").json()["status"] == "1"
        res = client.get("/health")
        assert res.json()["checks"]["store"] is True


def test_health_reports_and_logs_failed_store_probe(monkeypatch):
    from src.api import health as health_api

    class _DownStore(InMemoryKeyValueStore):
        async def get(self, key):  # type: ignore[override]
            raise ConnectionError("kv unreachable")

    warnings: list[tuple[str, dict]] = []

    class _RecordingLogger:
        def warning(self, event: str, **kw) -> None:
            warnings.append((event, kw))

        def info(self, event: str, **kw) -> None:
            pass

    monkeypatch.setattr(health_api, "logger", _RecordingLogger())

    client = TestClient(create_app(store=_DownStore()))
    res = client.get("/health")
    assert res.status_code == 200
    data = res.json()
    assert data["ok"] is False
    assert data["checks"]["store"] is False
    assert any(
        event == "health_store_probe_failed" and kw.get("error") == "kv unreachable"
        for event, kw in warnings
    ), f"missing probe failure warning in: {warnings}"
