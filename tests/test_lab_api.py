"""
Lab endpoints: gas laws, calculators and the battery circuit.
"""

import pytest


class TestGasLawsApi:
    def test_list_gases(self, client):
        r = client.get("/api/lab/gases")
        assert r.status_code == 200
        assert len(r.json()) == 5

    def test_ideal_volume(self, client):
        r = client.post(
            "/api/lab/gas-laws/volume",
            json={"moles": 1, "temperature_k": 273.15, "pressure_atm": 1},
        )
        assert r.status_code == 200
        assert r.json()["volume_l"] == pytest.approx(22.414, rel=1e-3)

    def test_van_der_waals_pressure(self, client):
        r = client.post(
            "/api/lab/gas-laws/pressure",
            json={"gas": "nitrogen", "law": "vanderwaals", "moles": 1, "temperature_k": 300, "volume_l": 24.6},
        )
        assert r.status_code == 200
        assert r.json()["pressure_atm"] == pytest.approx(1.0, rel=0.01)

    def test_unknown_gas_is_400(self, client):
        r = client.post("/api/lab/gas-laws/volume", json={"gas": "argon", "law": "vanderwaals"})
        assert r.status_code == 400
        assert "argon" in r.json()["message"]

    def test_unknown_law_is_422(self, client):
        r = client.post("/api/lab/gas-laws/volume", json={"law": "magic"})
        assert r.status_code == 422

    def test_speeds_without_distribution(self, client):
        body = client.post("/api/lab/gas-laws/speeds", json={"gas": "oxygen", "temperature_k": 300}).json()
        assert body["rms"] == pytest.approx(483.6, abs=0.5)
        assert body["distribution"] == []

    def test_speeds_with_distribution(self, client):
        body = client.post(
            "/api/lab/gas-laws/speeds", json={"gas": "helium", "include_distribution": True}
        ).json()
        assert len(body["distribution"]) == 100
        assert body["distribution"][0] == [0.0, 0.0]

    def test_mixture(self, client):
        body = client.post(
            "/api/lab/gas-laws/mixture",
            json={"gas1": "oxygen", "gas2": "nitrogen", "total_pressure_atm": 1.0, "fraction_gas1": 0.21},
        ).json()
        o2, n2 = body["components"]
        assert o2["partial_pressure_atm"] == pytest.approx(0.21)
        assert n2["partial_pressure_atm"] == pytest.approx(0.79)
        assert n2["mole_fraction"] == pytest.approx(0.79)


class TestCalculatorsApi:
    def test_list(self, client):
        names = client.get("/api/lab/calculators").json()
        assert "ph" in names
        assert "quantum-numbers" in names

    def test_ph(self, client):
        r = client.post("/api/lab/calculators/ph", json={"inputs": {"ph": 2}})
        assert r.status_code == 200
        body = r.json()
        assert body["calculator"] == "ph"
        assert body["result"] == "harmful"
        assert body["details"]["nature"] == "acidic"

    def test_ideal_gas(self, client):
        r = client.post(
            "/api/lab/calculators/ideal-gas",
            json={"target": "volume", "inputs": {"p": 1, "n": 1, "t": 273}},
        )
        assert r.json()["result"] == pytest.approx(22.4)

    def test_avogadro_divide(self, client):
        r = client.post(
            "/api/lab/calculators/avogadro",
            json={"operation": "divide", "inputs": {"value": 6.022e23}},
        )
        assert r.json()["result"] == pytest.approx(1.0)

    def test_quantum_check(self, client):
        r = client.post(
            "/api/lab/calculators/quantum-numbers",
            json={"target": "check", "inputs": {"n": 2, "l": 2, "ml": 0}},
        )
        body = r.json()
        assert body["result"] is False
        assert "l must be between 0 and 1" in body["details"]["reason"]

    def test_quantum_l_values(self, client):
        body = client.post(
            "/api/lab/calculators/quantum-numbers",
            json={"target": "l_values", "inputs": {"n": 3}},
        ).json()
        assert body["result"] == [0, 1, 2]
        assert body["details"]["orbitals"] == ["s", "p", "d"]

    def test_missing_inputs(self, client):
        r = client.post("/api/lab/calculators/percentage-yield", json={"inputs": {"actual": 5}})
        assert r.status_code == 400
        assert r.json() == {"message": "missing inputs: theoretical"}

    def test_calculator_error(self, client):
        r = client.post("/api/lab/calculators/ph", json={"inputs": {"ph": 20}})
        assert r.status_code == 400

    def test_unknown_calculator(self, client):
        r = client.post("/api/lab/calculators/alchemy", json={"inputs": {}})
        assert r.status_code == 404
        assert r.json() == {"message": "Calculator not found"}


class TestBatteryApi:
    def test_catalogue(self, client):
        body = client.get("/api/lab/batteries").json()
        assert len(body["batteries"]) == 5
        assert len(body["loads"]) == 4

    def test_circuit(self, client):
        r = client.post("/api/lab/battery/circuit", json={"battery_type": "alkaline", "load_type": "led"})
        assert r.status_code == 200
        body = r.json()
        assert body["load_resistance"] == 250
        assert body["current_ma"] == pytest.approx(1.5 / 250.2 * 1000)
        assert body["remaining_s"] > 0

    def test_explicit_resistance_overrides_load(self, client):
        body = client.post(
            "/api/lab/battery/circuit",
            json={"battery_type": "lead-acid", "load_type": "variable", "load_resistance": 10, "series_count": 3},
        ).json()
        assert body["load_resistance"] == 10
        assert body["total_voltage"] == pytest.approx(6.3)

    def test_unknown_battery(self, client):
        r = client.post("/api/lab/battery/circuit", json={"battery_type": "fuel-cell"})
        assert r.status_code == 400

    def test_discharge_until_flat(self, client):
        body = client.post(
            "/api/lab/battery/discharge",
            json={"battery_type": "zinc-carbon", "load_resistance": 0.2, "seconds": 10},
        ).json()
        assert body["charge_pct"] == 0.0
        assert body["circuit_closed"] is False
        assert body["elapsed_s"] == 1
        assert body["remaining_s"] is None

    def test_discharge_limit(self, client):
        r = client.post("/api/lab/battery/discharge", json={"seconds": 10 ** 6})
        assert r.status_code == 400

    def test_recharge(self, client):
        body = client.post(
            "/api/lab/battery/recharge", json={"battery_type": "lithium-ion", "charge_pct": 10}
        ).json()
        assert body["charge_pct"] == 100.0
        assert body["circuit_closed"] is False

    def test_recharge_primary_cell(self, client):
        r = client.post("/api/lab/battery/recharge", json={"battery_type": "zinc-carbon"})
        assert r.status_code == 400
        assert "not rechargeable" in r.json()["message"]
