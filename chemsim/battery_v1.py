"""
Battery v1 — galvanic cells in a simple DC circuit

Scope (LOCKED):
- Cell catalogue (chemistry, nominal voltage, capacity, internal resistance)
- Ohm's-law circuit values for n identical cells in series
- Coarse discharge model: charge drops by I(mA) / capacity(mAh) * 100
  percent per simulated second; circuit opens itself at 0 %

Conventions:
- Open-circuit voltage scales linearly with state of charge:
    V = V_cell * n * (charge% / 100)
- R_internal = r_cell * n
- I = V / (R_load + R_internal) when closed, else 0
- P = I * V

Units: V, A (mA where noted), Ohm, W, mAh, seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Optional


class BatteryError(ValueError):
    """Raised when invalid inputs are provided to battery helpers."""


@dataclass(frozen=True)
class CellType:
    key: str
    name: str
    anode: str
    cathode: str
    electrolyte: str
    voltage: float  # V
    capacity_mah: float
    internal_resistance: float  # Ohm
    rechargeable: bool
    anode_reaction: str
    cathode_reaction: str
    overall_reaction: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class LoadType:
    key: str
    name: str
    resistance: float  # Ohm
    variable_resistance: bool

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


CELL_TYPES_V1: Dict[str, CellType] = {
    "zinc-carbon": CellType(
        "zinc-carbon", "Zinc-Carbon", "Zinc", "Manganese Dioxide", "Ammonium Chloride",
        1.5, 1200, 0.8, False,
        "Zn → Zn²⁺ + 2e⁻",
        "2MnO₂ + H₂O + 2e⁻ → Mn₂O₃ + 2OH⁻",
        "Zn + 2MnO₂ + H₂O → ZnO + Mn₂O₃ + 2OH⁻",
    ),
    "alkaline": CellType(
        "alkaline", "Alkaline", "Zinc", "Manganese Dioxide", "Potassium Hydroxide",
        1.5, 2800, 0.2, False,
        "Zn + 2OH⁻ → ZnO + H₂O + 2e⁻",
        "2MnO₂ + H₂O + 2e⁻ → Mn₂O₃ + 2OH⁻",
        "Zn + 2MnO₂ → ZnO + Mn₂O₃",
    ),
    "lithium-ion": CellType(
        "lithium-ion", "Lithium-Ion", "Graphite (C)", "Lithium Cobalt Oxide", "Lithium Salt",
        3.7, 3200, 0.1, True,
        "LixC6 → C6 + xLi⁺ + xe⁻",
        "Li₁₋ₓCoO₂ + xLi⁺ + xe⁻ → LiCoO₂",
        "LixC6 + Li₁₋ₓCoO₂ → C6 + LiCoO₂",
    ),
    "lead-acid": CellType(
        "lead-acid", "Lead-Acid", "Lead", "Lead Dioxide", "Sulfuric Acid",
        2.1, 7000, 0.004, True,
        "Pb + SO₄²⁻ → PbSO₄ + 2e⁻",
        "PbO₂ + 4H⁺ + SO₄²⁻ + 2e⁻ → PbSO₄ + 2H₂O",
        "Pb + PbO₂ + 4H⁺ + 2SO₄²⁻ → 2PbSO₄ + 2H₂O",
    ),
    "nickel-metal-hydride": CellType(
        "nickel-metal-hydride", "Nickel-Metal Hydride", "Metal Hydride Alloy", "Nickel Oxyhydroxide",
        "Potassium Hydroxide",
        1.2, 2500, 0.15, True,
        "MH + OH⁻ → M + H₂O + e⁻",
        "NiOOH + H₂O + e⁻ → Ni(OH)₂ + OH⁻",
        "MH + NiOOH → M + Ni(OH)₂",
    ),
}

LOAD_TYPES_V1: Dict[str, LoadType] = {
    "led": LoadType("led", "LED Light", 250, False),
    "motor": LoadType("motor", "Small Motor", 50, True),
    "heating": LoadType("heating", "Heating Element", 20, False),
    "variable": LoadType("variable", "Variable Resistor", 100, True),
}


@dataclass(frozen=True)
class CircuitValues:
    total_voltage: float
    total_internal_resistance: float
    current: float  # A
    power: float  # W

    @property
    def current_ma(self) -> float:
        return self.current * 1000.0


@dataclass
class BatteryState:
    cell: CellType
    load_resistance: float
    series_count: int = 1
    charge_pct: float = 100.0
    elapsed_s: int = 0
    circuit_closed: bool = False


def get_cell(key: str) -> CellType:
    k = (key or "").strip().lower()
    if k not in CELL_TYPES_V1:
        raise BatteryError(f"Unknown battery type: {key!r}")
    return CELL_TYPES_V1[k]


def get_load(key: str) -> LoadType:
    k = (key or "").strip().lower()
    if k not in LOAD_TYPES_V1:
        raise BatteryError(f"Unknown load type: {key!r}")
    return LOAD_TYPES_V1[k]


def circuit_values(
    cell: CellType,
    load_resistance: float,
    series_count: int = 1,
    charge_pct: float = 100.0,
    circuit_closed: bool = True,
) -> CircuitValues:
    if series_count < 1:
        raise BatteryError("series_count must be >= 1.")
    if load_resistance < 0:
        raise BatteryError("load_resistance must be >= 0.")
    if charge_pct < 0 or charge_pct > 100:
        raise BatteryError("charge_pct must be between 0 and 100.")

    total_voltage = cell.voltage * series_count * (charge_pct / 100.0)
    total_r_int = cell.internal_resistance * series_count
    current = total_voltage / (load_resistance + total_r_int) if circuit_closed else 0.0
    return CircuitValues(
        total_voltage=total_voltage,
        total_internal_resistance=total_r_int,
        current=current,
        power=current * total_voltage,
    )


def state_values(state: BatteryState) -> CircuitValues:
    return circuit_values(
        state.cell,
        state.load_resistance,
        state.series_count,
        state.charge_pct,
        state.circuit_closed,
    )


def discharge_step(state: BatteryState) -> CircuitValues:
    """
    One simulated second of discharge.

    No-op on an open circuit or a flat battery. Opens the circuit once the
    charge reaches 0 %.
    """
    values = state_values(state)
    if not state.circuit_closed or state.charge_pct <= 0:
        return values

    depletion_pct = values.current_ma / state.cell.capacity_mah * 100.0
    state.charge_pct = max(0.0, state.charge_pct - depletion_pct)
    state.elapsed_s += 1
    if state.charge_pct <= 0:
        state.circuit_closed = False
    return state_values(state)


def run_discharge(state: BatteryState, seconds: int) -> CircuitValues:
    if seconds < 0:
        raise BatteryError("seconds must be >= 0.")
    values = state_values(state)
    for _ in range(seconds):
        if not state.circuit_closed:
            break
        values = discharge_step(state)
    return values


def recharge(state: BatteryState) -> bool:
    """Full recharge for rechargeable chemistries; opens the circuit. Returns False otherwise."""
    if not state.cell.rechargeable:
        return False
    state.circuit_closed = False
    state.charge_pct = 100.0
    return True


def remaining_seconds(state: BatteryState) -> Optional[int]:
    """Time to empty at the present draw, or None when nothing is drawn."""
    values = state_values(state)
    if values.current_ma <= 0:
        return None
    return round((state.charge_pct / 100.0) * state.cell.capacity_mah / values.current_ma * 3600)
