from __future__ import annotations

from typing import Any, Callable, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chemsim import battery_v1, calculators_v1, gas_laws_v1
from config import BATTERY_MAX_DISCHARGE_SECONDS, GAS_SPEED_DISTRIBUTION_POINTS
from schemas import (
    BatteryCircuitRequest,
    BatteryCircuitResponse,
    BatteryDischargeRequest,
    CalculatorRequest,
    CalculatorResponse,
    GasMixtureRequest,
    GasPressureRequest,
    GasSpeedsRequest,
    GasSpeedsResponse,
    GasVolumeRequest,
    MessageResponse,
)


router = APIRouter(prefix="/api/lab", tags=["lab"])

_ERRORS = {400: {"model": MessageResponse}, 404: {"model": MessageResponse}}


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


# ============================================================================
# Gas laws
# ============================================================================

@router.get("/gases")
def gases():
    return [g.to_dict() for g in gas_laws_v1.GASES_V1.values()]


@router.post("/gas-laws/volume", responses=_ERRORS)
def gas_volume(req: GasVolumeRequest):
    try:
        v = gas_laws_v1.calculate_volume(req.moles, req.temperature_k, req.pressure_atm, req.law, req.gas)
    except gas_laws_v1.GasLawError as e:
        return _message(400, str(e))
    return {"gas": req.gas, "law": req.law, "volume_l": v}


@router.post("/gas-laws/pressure", responses=_ERRORS)
def gas_pressure(req: GasPressureRequest):
    try:
        p = gas_laws_v1.calculate_pressure(req.moles, req.temperature_k, req.volume_l, req.law, req.gas)
    except gas_laws_v1.GasLawError as e:
        return _message(400, str(e))
    return {"gas": req.gas, "law": req.law, "pressure_atm": p}


@router.post("/gas-laws/speeds", response_model=GasSpeedsResponse, responses=_ERRORS)
def gas_speeds(req: GasSpeedsRequest):
    try:
        gas = gas_laws_v1.get_gas(req.gas)
        speeds = gas_laws_v1.molecular_speeds(req.temperature_k, gas.molar_mass)
        dist = (
            gas_laws_v1.speed_distribution(req.temperature_k, gas.molar_mass, GAS_SPEED_DISTRIBUTION_POINTS)
            if req.include_distribution
            else []
        )
    except gas_laws_v1.GasLawError as e:
        return _message(400, str(e))
    return {
        "gas": gas.key,
        "temperature_k": req.temperature_k,
        "most_probable": speeds.most_probable,
        "mean": speeds.mean,
        "rms": speeds.rms,
        "distribution": dist,
    }


@router.post("/gas-laws/mixture", responses=_ERRORS)
def gas_mixture(req: GasMixtureRequest):
    try:
        g1 = gas_laws_v1.get_gas(req.gas1)
        g2 = gas_laws_v1.get_gas(req.gas2)
        p1, p2 = gas_laws_v1.partial_pressures(req.total_pressure_atm, req.fraction_gas1)
    except gas_laws_v1.GasLawError as e:
        return _message(400, str(e))
    return {
        "total_pressure_atm": req.total_pressure_atm,
        "components": [
            {"gas": g1.key, "mole_fraction": req.fraction_gas1, "partial_pressure_atm": p1},
            {"gas": g2.key, "mole_fraction": 1 - req.fraction_gas1, "partial_pressure_atm": p2},
        ],
    }


# ============================================================================
# Calculators
# ============================================================================

def _need(inputs: Dict[str, float], *names: str) -> list:
    missing = [n for n in names if n not in inputs]
    if missing:
        raise calculators_v1.CalculatorError(f"missing inputs: {', '.join(missing)}")
    return [inputs[n] for n in names]


def _calc_raoult(req: CalculatorRequest) -> Dict[str, Any]:
    p1, x1, p2, x2 = _need(req.inputs, "p0_1", "x1", "p0_2", "x2")
    return {"result": calculators_v1.raoult_total_vapour_pressure(p1, x1, p2, x2)}


def _calc_ideal_gas(req: CalculatorRequest) -> Dict[str, Any]:
    kwargs = {k: req.inputs[k] for k in ("p", "v", "n", "t", "r") if k in req.inputs}
    return {"result": calculators_v1.ideal_gas_solve(req.target or "pv", **kwargs)}


def _calc_atomic_mass(req: CalculatorRequest) -> Dict[str, Any]:
    m1, a1, m2, a2 = _need(req.inputs, "mass1", "abundance1", "mass2", "abundance2")
    return {"result": calculators_v1.average_atomic_mass(m1, a1, m2, a2)}


def _calc_avogadro(req: CalculatorRequest) -> Dict[str, Any]:
    (value,) = _need(req.inputs, "value")
    return {"result": calculators_v1.avogadro_convert(value, req.operation or "multiply")}


def _calc_ph(req: CalculatorRequest) -> Dict[str, Any]:
    (ph,) = _need(req.inputs, "ph")
    chk = calculators_v1.ph_check(ph)
    return {
        "result": "harmful" if chk.harmful else "safe",
        "details": {"distance_from_neutral": chk.distance_from_neutral, "nature": chk.nature},
    }


def _calc_yield(req: CalculatorRequest) -> Dict[str, Any]:
    actual, theoretical = _need(req.inputs, "actual", "theoretical")
    return {"result": calculators_v1.percentage_yield(actual, theoretical)}


def _calc_molarity(req: CalculatorRequest) -> Dict[str, Any]:
    kwargs = {k: req.inputs[k] for k in ("molarity_m", "moles", "volume_l") if k in req.inputs}
    return {"result": calculators_v1.molarity(req.target or "molarity", **kwargs)}


def _calc_molarity_density(req: CalculatorRequest) -> Dict[str, Any]:
    kwargs = {k: req.inputs[k] for k in ("molarity_m", "density", "percent", "molar_mass") if k in req.inputs}
    return {"result": calculators_v1.molarity_from_density(req.target or "molarity", **kwargs)}


def _calc_quantum(req: CalculatorRequest) -> Dict[str, Any]:
    target = (req.target or "check").strip().lower()
    ints = {k: int(v) for k, v in req.inputs.items()}
    if target == "min_n":
        (l,) = _need(ints, "l")
        return {"result": calculators_v1.minimum_n_for_l(l), "details": {"orbital": calculators_v1.orbital_name(l)}}
    if target == "l_values":
        (n,) = _need(ints, "n")
        values = calculators_v1.possible_l_values(n)
        return {"result": values, "details": {"orbitals": [calculators_v1.orbital_name(l) for l in values]}}
    if target == "ml_values":
        (l,) = _need(ints, "l")
        return {"result": calculators_v1.possible_ml_values(l)}
    if target == "check":
        n, l, ml = _need(ints, "n", "l", "ml")
        valid, reason = calculators_v1.check_quantum_numbers(n, l, ml)
        return {"result": valid, "details": {"reason": reason}}
    raise calculators_v1.CalculatorError(f"Unknown quantum target: {target!r}")


CALCULATORS: Dict[str, Callable[[CalculatorRequest], Dict[str, Any]]] = {
    "raoult": _calc_raoult,
    "ideal-gas": _calc_ideal_gas,
    "atomic-mass": _calc_atomic_mass,
    "avogadro": _calc_avogadro,
    "ph": _calc_ph,
    "percentage-yield": _calc_yield,
    "molarity": _calc_molarity,
    "molarity-density": _calc_molarity_density,
    "quantum-numbers": _calc_quantum,
}


@router.get("/calculators")
def calculators():
    return sorted(CALCULATORS)


@router.post("/calculators/{name}", response_model=CalculatorResponse, responses=_ERRORS)
def run_calculator(name: str, req: CalculatorRequest):
    fn = CALCULATORS.get(name)
    if fn is None:
        return _message(404, "Calculator not found")
    try:
        out = fn(req)
    except (calculators_v1.CalculatorError, ZeroDivisionError) as e:
        return _message(400, str(e) or "Error in calculation")
    return {"calculator": name, "result": out["result"], "details": out.get("details", {})}


# ============================================================================
# Battery
# ============================================================================

@router.get("/batteries")
def batteries():
    return {
        "batteries": [c.to_dict() for c in battery_v1.CELL_TYPES_V1.values()],
        "loads": [l.to_dict() for l in battery_v1.LOAD_TYPES_V1.values()],
    }


def _battery_state(req: BatteryCircuitRequest) -> battery_v1.BatteryState:
    cell = battery_v1.get_cell(req.battery_type)
    load_r = req.load_resistance if req.load_resistance is not None else battery_v1.get_load(req.load_type).resistance
    return battery_v1.BatteryState(
        cell=cell,
        load_resistance=load_r,
        series_count=req.series_count,
        charge_pct=req.charge_pct,
        circuit_closed=req.circuit_closed,
    )


def _battery_out(state: battery_v1.BatteryState, values: battery_v1.CircuitValues) -> Dict[str, Any]:
    return {
        "battery_type": state.cell.key,
        "load_resistance": state.load_resistance,
        "series_count": state.series_count,
        "charge_pct": state.charge_pct,
        "circuit_closed": state.circuit_closed,
        "total_voltage": values.total_voltage,
        "total_internal_resistance": values.total_internal_resistance,
        "current_ma": values.current_ma,
        "power_w": values.power,
        "elapsed_s": state.elapsed_s,
        "remaining_s": battery_v1.remaining_seconds(state),
    }


@router.post("/battery/circuit", response_model=BatteryCircuitResponse, responses=_ERRORS)
def battery_circuit(req: BatteryCircuitRequest):
    try:
        state = _battery_state(req)
        values = battery_v1.state_values(state)
    except battery_v1.BatteryError as e:
        return _message(400, str(e))
    return _battery_out(state, values)


@router.post("/battery/discharge", response_model=BatteryCircuitResponse, responses=_ERRORS)
def battery_discharge(req: BatteryDischargeRequest):
    if req.seconds > BATTERY_MAX_DISCHARGE_SECONDS:
        return _message(400, f"seconds must be <= {BATTERY_MAX_DISCHARGE_SECONDS}")
    try:
        state = _battery_state(req)
        values = battery_v1.run_discharge(state, req.seconds)
    except battery_v1.BatteryError as e:
        return _message(400, str(e))
    return _battery_out(state, values)


@router.post("/battery/recharge", response_model=BatteryCircuitResponse, responses=_ERRORS)
def battery_recharge(req: BatteryCircuitRequest):
    try:
        state = _battery_state(req)
    except battery_v1.BatteryError as e:
        return _message(400, str(e))
    if not battery_v1.recharge(state):
        return _message(400, f"{state.cell.name} batteries are not rechargeable")
    return _battery_out(state, battery_v1.state_values(state))
