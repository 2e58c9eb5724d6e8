"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
Drives the public routes through the TestClient against in-memory SQLite.
The ``client`` fixture pins the random source to roll 75 (a WIN).

These tests verify:
- Health and pool endpoints
- Error kinds map to the documented HTTP statuses
- Request validation failures surface as InvalidInput
"""

from __future__ import annotations

import pytest

from vaultroll.api.routes import game
from vaultroll.errors import StoreUnavailable


# ===========================================================================
# Health & pool
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestPoolEndpoint:
    def test_pool_seeds_on_first_read(self, client):
        resp = client.get("/api/pool")
        assert resp.status_code == 200
        assert resp.json() == {"pool_amount": 1000, "recent_wins": []}

    def test_recent_wins_after_a_win(self, client, db_engine, make_account):
        make_account(db_engine, balance=100)
        client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 10})

        data = client.get("/api/pool").json()

        assert data["pool_amount"] == 990
        assert data["recent_wins"][0]["player"] == "Alice"
        assert data["recent_wins"][0]["amount"] == 20
        assert data["recent_wins"][0]["is_jackpot"] is False


# ===========================================================================
# Accounts
# ===========================================================================
class TestAccountRoutes:
    def test_register_then_refresh(self, client):
        body = {"account_key": "tg-900", "first_name": "Ines", "language_code": "pt"}

        first = client.post("/api/accounts", json=body)
        assert first.status_code == 201
        assert first.json()["created"] is True
        assert first.json()["balance"] == 0

        again = client.post("/api/accounts", json={**body, "first_name": "Inês"})
        assert again.status_code == 200
        assert again.json()["created"] is False
        assert again.json()["first_name"] == "Inês"

    def test_register_requires_key(self, client):
        resp = client.post("/api/accounts", json={"first_name": "NoKey"})
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "InvalidInput"

    def test_summary(self, client, db_engine, make_account):
        make_account(db_engine, balance=77)
        resp = client.get("/api/accounts/tg-1001")
        assert resp.status_code == 200
        assert resp.json()["balance"] == 77
        assert resp.json()["can_claim"] is True

    def test_summary_unknown(self, client):
        resp = client.get("/api/accounts/tg-404")
        assert resp.status_code == 404
        assert resp.json()["error"] == {"kind": "AccountNotFound", "message": "User not found"}


# ===========================================================================
# Wagers
# ===========================================================================
class TestWagerRoute:
    def test_win(self, client, db_engine, make_account):
        make_account(db_engine, balance=100)

        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 10})

        assert resp.status_code == 200
        data = resp.json()
        assert data["roll"] == 75
        assert data["band"] == "WIN"
        assert data["is_win"] is True
        assert data["payout"] == 20
        assert data["new_balance"] == 110
        assert data["new_pool_amount"] == 990
        assert data["flavor"]["category"] == "success"

    @pytest.mark.parametrize("amount", [0, -3, 2.5, "10", None])
    def test_invalid_amount(self, client, db_engine, make_account, amount):
        make_account(db_engine, balance=100)
        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": amount})
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "InvalidInput"

    def test_unknown_account(self, client):
        resp = client.post("/api/wagers", json={"account_key": "ghost", "amount": 5})
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "AccountNotFound"

    def test_insufficient_funds(self, client, db_engine, make_account):
        make_account(db_engine, balance=4)
        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 5})
        assert resp.status_code == 400
        assert resp.json()["error"] == {
            "kind": "InsufficientFunds",
            "message": "Insufficient balance",
        }

    def test_pool_exhausted(self, client, db_engine, make_account, seed_pool):
        make_account(db_engine, balance=100)
        seed_pool(db_engine, 5)
        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 10})
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "PoolExhausted"
        assert resp.json()["error"]["pool_amount"] == 5

    def test_store_unavailable(self, client, monkeypatch):
        def _down(*args, **kwargs):
            raise StoreUnavailable()

        monkeypatch.setattr(game, "place_wager", _down)
        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 5})
        assert resp.status_code == 503
        assert resp.json()["error"]["kind"] == "StoreUnavailable"

    def test_unexpected_error_is_masked(self, client, monkeypatch):
        def _bug(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(game, "place_wager", _bug)
        resp = client.post("/api/wagers", json={"account_key": "tg-1001", "amount": 5})
        assert resp.status_code == 500
        assert resp.json()["error"] == {
            "kind": "InternalError",
            "message": "Internal Server Error",
        }


# ===========================================================================
# Daily allowance
# ===========================================================================
class TestDailyRoute:
    def test_claim_then_cooldown(self, client, db_engine, make_account):
        make_account(db_engine, balance=0)

        first = client.post("/api/daily", json={"account_key": "tg-1001"})
        assert first.status_code == 200
        assert first.json()["balance"] == 100
        assert first.json()["message"] == "Claimed $100!"

        second = client.post("/api/daily", json={"account_key": "tg-1001"})
        assert second.status_code == 429
        error = second.json()["error"]
        assert error["kind"] == "CooldownActive"
        assert error["hours_remaining"] == 24
        assert error["message"] == "Please wait 24 hours"
        assert second.headers["Retry-After"] == str(24 * 3600)

    def test_unknown_account(self, client):
        resp = client.post("/api/daily", json={"account_key": "ghost"})
        assert resp.status_code == 404

    def test_schema_error_is_internal_not_unavailable(self, client, db_engine):
        from vaultroll.database.models import Base

        Base.metadata.drop_all(db_engine)
        resp = client.get("/api/pool")
        assert resp.status_code == 500
        assert resp.json()["error"]["kind"] == "InternalError"
