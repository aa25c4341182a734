"""Tests for the /scan and /health endpoints."""

from fastapi.testclient import TestClient

from rsiscan.api.routers import configure_routers
from rsiscan.main import app

from conftest import make_series, three_dip_closes

client = TestClient(app)


# ── Helpers ──────────────────────────────────────────────────────────────


def _make_fetch(failing=()):
    series = make_series(three_dip_closes())

    async def _fetch(symbol, horizon):
        if symbol in failing:
            raise RuntimeError("provider down")
        return series

    return _fetch


# ── Tests ────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestScanEndpoint:
    def test_scan_returns_ranked_results(self):
        configure_routers(_make_fetch(failing={"BAD"}), data_source="Test", batch_delay_seconds=0.0)
        resp = client.get(
            "/scan",
            params={
                "symbols": "bad,tqqq",
                "horizon": "single",
                "mode": "edge",
                "lookforward_bars": 40,
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [r["symbol"] for r in data["results"]] == ["TQQQ", "BAD"]
        assert data["results"][0]["short_term"]["total_signals"] == 3
        assert data["results"][0]["short_term"]["win_rate_at_target_a"] == 100.0
        assert data["results"][1]["error"]
        assert data["data_source"] == "Test"
        assert data["config"]["period"] == 14
        assert "BAD" in data["excluded"]
        assert "timestamp" in data

    def test_min_signals_explains_exclusion(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        resp = client.get(
            "/scan",
            params={
                "symbols": "TQQQ",
                "horizon": "single",
                "mode": "edge",
                "lookforward_bars": 40,
                "min_signals": 5,
            },
        )
        assert resp.status_code == 200
        assert resp.json()["excluded"]["TQQQ"] == ["3 signals (need 5)"]

    def test_invalid_thresholds_rejected(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        resp = client.get(
            "/scan", params={"symbols": "TQQQ", "oversold": 80, "overbought": 70},
        )
        assert resp.status_code == 422
        assert "oversold" in resp.json()["detail"]

    def test_invalid_mode_rejected(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        resp = client.get("/scan", params={"symbols": "TQQQ", "mode": "often"})
        assert resp.status_code == 422

    def test_bad_targets_rejected(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        resp = client.get("/scan", params={"symbols": "TQQQ", "targets": "abc"})
        assert resp.status_code == 422

    def test_passing_applies_filters(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        params = {
            "symbols": "TQQQ,SOXL",
            "horizon": "single",
            "mode": "edge",
            "lookforward_bars": 40,
        }
        resp = client.get("/scan", params={**params, "min_signals": 3})
        assert [r["symbol"] for r in resp.json()["passing"]] == ["TQQQ", "SOXL"]

        resp = client.get("/scan", params={**params, "min_signals": 99})
        data = resp.json()
        assert data["passing"] == []
        assert [r["symbol"] for r in data["results"]] == ["TQQQ", "SOXL"]

    def test_in_zone_only(self):
        configure_routers(_make_fetch(), batch_delay_seconds=0.0)
        resp = client.get(
            "/scan",
            params={
                "symbols": "TQQQ",
                "horizon": "single",
                "mode": "edge",
                "lookforward_bars": 40,
                "in_zone_only": "true",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        # Flat tail leaves RSI near 82, outside the oversold zone
        assert data["passing"] == []
        assert data["hot"] == []
        assert data["config"]["in_zone_only"] is True
        assert data["excluded"]["TQQQ"] == ["not currently in signal zone"]
