"""
State-change HTTP API: stateless resolve plus session lifecycle.

Sessions in these tests use the manual clock (see conftest.client), so
time only moves through POST /sessions/{id}/tick.
"""

import time

import pytest
from fastapi.testclient import TestClient

import session_store


def _create(client, **body):
    r = client.post("/api/state-change/sessions", json=body)
    assert r.status_code == 201, r.text
    return r.json()


class TestSubstancesAndResolve:
    def test_list_substances(self, client):
        r = client.get("/api/state-change/substances")
        assert r.status_code == 200
        names = [s["name"] for s in r.json()]
        assert names == ["Water", "Iron", "Nitrogen"]

    def test_resolve_from_temperature(self, client):
        r = client.post("/api/state-change/resolve", json={"substance": "water", "mass": 100, "temperature": 20})
        assert r.status_code == 200
        body = r.json()
        assert body["substance"] == "Water"
        assert body["energy"] == pytest.approx(41715.0)
        assert body["temperature"] == pytest.approx(20.0)
        assert body["phase"] == "liquid"
        assert body["energy_display"].endswith(" kJ")

    def test_resolve_from_energy_on_melting_plateau(self, client):
        r = client.post("/api/state-change/resolve", json={"mass": 100, "energy": 20000})
        body = r.json()
        assert body["temperature"] == 0.0
        assert body["phase"] == "melting"

    @pytest.mark.parametrize("payload", [{}, {"temperature": 20, "energy": 100}])
    def test_resolve_needs_exactly_one_input(self, client, payload):
        r = client.post("/api/state-change/resolve", json=payload)
        assert r.status_code == 422

    @pytest.mark.parametrize(
        "payload",
        [
            {"temperature": 1e307},
            {"temperature": -300},
            {"temperature": 10001},
            {"energy": 1e12},
            {"energy": -1e12},
        ],
    )
    def test_resolve_rejects_unbounded_inputs(self, client, payload):
        r = client.post("/api/state-change/resolve", json=payload)
        assert r.status_code == 422

    def test_resolve_accepts_absolute_zero(self, client):
        r = client.post("/api/state-change/resolve", json={"temperature": -273.15})
        assert r.status_code == 200
        body = r.json()
        assert body["phase"] == "solid"
        assert body["temperature"] == pytest.approx(-273.15)

    def test_resolve_unknown_substance(self, client):
        r = client.post("/api/state-change/resolve", json={"substance": "Gold", "temperature": 20})
        assert r.status_code == 404
        assert r.json() == {"message": "Substance not found"}


class TestSessionLifecycle:
    def test_create_defaults(self, client):
        snap = _create(client)
        assert snap["substance"] == "Water"
        assert snap["mass"] == 100.0
        assert snap["direction"] == "idle"
        assert snap["temperature"] == pytest.approx(20.0)
        assert snap["phase"] == "liquid"
        assert snap["interval_ms"] == 50
        assert snap["clock_running"] is False
        assert snap["session_id"]

    def test_create_unknown_substance(self, client):
        r = client.post("/api/state-change/sessions", json={"substance": "Gold"})
        assert r.status_code == 404

    @pytest.mark.parametrize(
        "body",
        [{"mass": 0}, {"mass": 5000}, {"heating_rate": 10}, {"interval_ms": 5}, {"interval_ms": 500}],
    )
    def test_create_rejects_out_of_range(self, client, body):
        r = client.post("/api/state-change/sessions", json=body)
        assert r.status_code == 422

    def test_get_session(self, client):
        sid = _create(client)["session_id"]
        r = client.get(f"/api/state-change/sessions/{sid}")
        assert r.status_code == 200
        assert r.json()["session_id"] == sid

    def test_unknown_session(self, client):
        r = client.get("/api/state-change/sessions/nope")
        assert r.status_code == 404
        assert r.json() == {"message": "Session not found"}

    def test_delete_session(self, client):
        sid = _create(client)["session_id"]
        assert client.delete(f"/api/state-change/sessions/{sid}").status_code == 204
        assert client.get(f"/api/state-change/sessions/{sid}").status_code == 404
        assert client.delete(f"/api/state-change/sessions/{sid}").status_code == 404


class TestCommandsAndTicks:
    def test_heat_then_tick(self, client):
        sid = _create(client)["session_id"]
        r = client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "heat"})
        assert r.status_code == 200
        assert r.json()["direction"] == "heating"

        r = client.post(f"/api/state-change/sessions/{sid}/tick", json={"ticks": 1, "interval_ms": 1000})
        snap = r.json()
        assert snap["energy"] == pytest.approx(42215.0)
        assert snap["temperature_display"] == pytest.approx(21.2)
        assert snap["phase"] == "liquid"
        assert snap["tick_count"] == 1
        assert snap["elapsed_ms"] == 1000

    def test_idle_ticks_do_nothing(self, client):
        sid = _create(client)["session_id"]
        snap = client.post(f"/api/state-change/sessions/{sid}/tick", json={"ticks": 5}).json()
        assert snap["tick_count"] == 0
        assert snap["energy"] == pytest.approx(41715.0)

    def test_cool_to_melting(self, client):
        sid = _create(client)["session_id"]
        client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "Cool"})
        snap = client.post(
            f"/api/state-change/sessions/{sid}/tick", json={"ticks": 40, "interval_ms": 1000}
        ).json()
        assert snap["phase"] == "melting"
        assert snap["temperature"] == 0.0

    def test_heating_saturates_on_boiling_plateau(self, client):
        sid = _create(client, heating_rate=2000)["session_id"]
        client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "heat"})
        snap = client.post(
            f"/api/state-change/sessions/{sid}/tick", json={"ticks": 100, "interval_ms": 1000}
        ).json()
        assert snap["saturation"] == "max"
        assert snap["energy"] == pytest.approx(120000.0)
        assert snap["phase"] == "boiling"
        assert snap["direction"] == "heating"

        snap = client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "stop"}).json()
        assert snap["saturation"] is None
        assert snap["direction"] == "idle"

    def test_invalid_direction(self, client):
        sid = _create(client)["session_id"]
        r = client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "warp"})
        assert r.status_code == 422

    def test_too_many_ticks(self, client):
        sid = _create(client)["session_id"]
        r = client.post(f"/api/state-change/sessions/{sid}/tick", json={"ticks": 10001})
        assert r.status_code == 400

    def test_command_unknown_session(self, client):
        r = client.post("/api/state-change/sessions/nope/command", json={"direction": "heat"})
        assert r.status_code == 404


class TestUpdate:
    def test_change_substance_resets(self, client):
        sid = _create(client)["session_id"]
        client.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "heat"})
        client.post(f"/api/state-change/sessions/{sid}/tick", json={"ticks": 10, "interval_ms": 1000})

        snap = client.patch(f"/api/state-change/sessions/{sid}", json={"substance": "Iron"}).json()
        assert snap["substance"] == "Iron"
        assert snap["temperature"] == pytest.approx(20.0)
        assert snap["phase"] == "solid"
        assert snap["direction"] == "idle"

    def test_change_mass_keeps_temperature(self, client):
        sid = _create(client)["session_id"]
        snap = client.patch(f"/api/state-change/sessions/{sid}", json={"mass": 250}).json()
        assert snap["mass"] == 250.0
        assert snap["temperature"] == pytest.approx(20.0)
        assert snap["energy"] == pytest.approx(2.5 * 41715.0)

    def test_change_rate_and_interval(self, client):
        sid = _create(client)["session_id"]
        snap = client.patch(
            f"/api/state-change/sessions/{sid}", json={"heating_rate": 1000, "interval_ms": 100}
        ).json()
        assert snap["heating_rate_power"] == 1000.0
        assert snap["interval_ms"] == 100

    def test_unknown_substance(self, client):
        sid = _create(client)["session_id"]
        r = client.patch(f"/api/state-change/sessions/{sid}", json={"substance": "Gold"})
        assert r.status_code == 404
        assert client.get(f"/api/state-change/sessions/{sid}").json()["substance"] == "Water"

    def test_out_of_range_mass(self, client):
        sid = _create(client)["session_id"]
        r = client.patch(f"/api/state-change/sessions/{sid}", json={"mass": 5000})
        assert r.status_code == 422


class TestLimits:
    def test_session_limit(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "STATE_CHANGE_MAX_SESSIONS", 1)
        _create(client)
        r = client.post("/api/state-change/sessions", json={})
        assert r.status_code == 503

    def test_abandoned_sessions_expire_and_free_the_cap(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "STATE_CHANGE_MAX_SESSIONS", 3)
        monkeypatch.setattr(session_store, "STATE_CHANGE_SESSION_TTL_SECONDS", 60)
        abandoned = [_create(client)["session_id"] for _ in range(3)]
        assert client.post("/api/state-change/sessions", json={}).status_code == 503

        # A minute passes with nobody reading or driving them.
        for sess in session_store.list_sessions():
            sess.last_seen -= 61

        fresh = _create(client)["session_id"]
        assert [s.session_id for s in session_store.list_sessions()] == [fresh]
        for sid in abandoned:
            assert client.get(f"/api/state-change/sessions/{sid}").status_code == 404

    def test_reading_a_session_keeps_it_alive(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "STATE_CHANGE_SESSION_TTL_SECONDS", 60)
        kept = _create(client)["session_id"]
        dropped = _create(client)["session_id"]
        for sess in session_store.list_sessions():
            sess.last_seen -= 61

        assert client.get(f"/api/state-change/sessions/{kept}").status_code == 200
        assert client.get("/health").json()["sessions"] == 1
        assert client.get(f"/api/state-change/sessions/{dropped}").status_code == 404

    def test_zero_ttl_never_expires(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "STATE_CHANGE_SESSION_TTL_SECONDS", 0)
        _create(client)
        session_store.list_sessions()[0].last_seen -= 10 ** 6
        assert session_store.expire_idle_sessions() == 0
        assert len(session_store.list_sessions()) == 1

    def test_expiry_stops_the_clock(self, monkeypatch):
        monkeypatch.setattr(session_store, "STATE_CHANGE_SESSION_TTL_SECONDS", 60)
        sess = session_store.create_session("Water", 100.0, 500.0, 50, background_clock=True)
        assert sess.driver.running
        sess.last_seen -= 61

        assert session_store.expire_idle_sessions() == 1
        assert not sess.driver.running
        assert session_store.list_sessions() == []

    def test_creation_rate_limit(self, manual_clock, monkeypatch):
        import main

        monkeypatch.setattr(main, "RATE_LIMIT_SESSIONS_PER_WINDOW", 2)
        with TestClient(main.create_app()) as c:
            assert c.post("/api/state-change/sessions", json={}).status_code == 201
            assert c.post("/api/state-change/sessions", json={}).status_code == 201
            r = c.post("/api/state-change/sessions", json={})
            assert r.status_code == 429
            assert r.json()["error"] == "RATE_LIMITED"
            # Other routes are not throttled.
            assert c.get("/api/state-change/substances").status_code == 200


class TestBackgroundClock:
    def test_clock_advances_session(self, monkeypatch):
        from main import create_app

        monkeypatch.setattr(session_store, "STATE_CHANGE_BACKGROUND_CLOCK", True)
        with TestClient(create_app()) as c:
            snap = _create(c, interval_ms=10)
            sid = snap["session_id"]
            assert snap["clock_running"] is True

            c.post(f"/api/state-change/sessions/{sid}/command", json={"direction": "heat"})
            deadline = time.time() + 2.0
            while time.time() < deadline:
                snap = c.get(f"/api/state-change/sessions/{sid}").json()
                if snap["tick_count"] > 0:
                    break
                time.sleep(0.02)
            assert snap["tick_count"] > 0
            assert snap["energy"] > 41715.0

            assert c.delete(f"/api/state-change/sessions/{sid}").status_code == 204
        assert session_store.list_sessions() == []

    def test_shutdown_stops_clocks(self, monkeypatch):
        from main import create_app

        monkeypatch.setattr(session_store, "STATE_CHANGE_BACKGROUND_CLOCK", True)
        with TestClient(create_app()) as c:
            _create(c)
            sess = session_store.list_sessions()[0]
            assert sess.driver.running
        assert not sess.driver.running
        assert session_store.list_sessions() == []
