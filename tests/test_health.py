"""Tests for the /health endpoint."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.core.trade.registry import TraderRegistry
from src.db.database import get_db
from src.main import app
from src.services.trade_service import TradeService


def test_health_returns_ok(client: TestClient) -> None:
    """GET /health should return 200 with status 'ok'."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_health_without_trade_service(client: TestClient) -> None:
    data = client.get("/health").json()
    assert data["traders"] == 0
    assert data["active_sessions"] == 0


def test_health_counts_traders(client: TestClient) -> None:
    registry = TraderRegistry()
    registry.load_from_json("src/data/seed_traders.json")
    app.state.trade_service = TradeService(MagicMock(), registry, MagicMock())
    try:
        data = client.get("/health").json()
    finally:
        del app.state.trade_service
    assert data["traders"] == 4
    assert data["active_sessions"] == 0


def test_health_database_down(client: TestClient) -> None:
    """DB 오류 시 error 상태 보고"""
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    def _broken_db():
        yield broken

    original = app.dependency_overrides[get_db]
    app.dependency_overrides[get_db] = _broken_db
    try:
        response = client.get("/health")
    finally:
        app.dependency_overrides[get_db] = original

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "error"
    assert data["database"] == "disconnected"
