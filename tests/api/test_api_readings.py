"""Tests for station readings and forecast comparison endpoints."""

from __future__ import annotations


class TestReadingsAPI:
    async def test_recent_readings(self, client):
        resp = await client.get("/api/readings/Inspo")
        assert resp.status_code == 200
        data = resp.json()
        assert data["station_id"] == "KSLC"
        assert data.get("error_message") is None
        assert len(data["readings"]) == 8
        assert data["readings"][-1]["wind_gust"] == 14.0

    async def test_station_error_is_reported_not_raised(self, client):
        resp = await client.get("/api/readings/Point of the Mountain")
        assert resp.status_code == 200
        assert resp.json()["error_message"].startswith("Error loading readings")

    async def test_site_without_station(self, client):
        resp = await client.get("/api/readings/Broken Ridge")
        assert resp.status_code == 404

    async def test_unknown_site(self, client):
        resp = await client.get("/api/readings/Nowhere")
        assert resp.status_code == 404


class TestCompareAPI:
    async def test_comparison(self, client):
        resp = await client.get("/api/compare/Inspo")
        assert resp.status_code == 200
        data = resp.json()
        assert data["error_message"] is None
        series = {p["series"] for p in data["comparison"]["points"]}
        assert {"Actual Wind", "Actual Gust"} <= series
        assert data["comparison"]["actual_arrows"]

    async def test_no_readings_no_comparison(self, client):
        resp = await client.get("/api/compare/Point of the Mountain")
        data = resp.json()
        assert data["comparison"] is None
        assert data["error_message"].startswith("Error loading readings")
