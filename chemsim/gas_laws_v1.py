"""
Gas Laws v1 — ideal gas, Van der Waals (approximate), kinetic theory

Units (locked):
- Pressure: atm
- Volume: L
- Temperature: K
- Amount: mol
- Molar mass: g/mol
- Speeds: m/s

Van der Waals volume is NOT solved as a cubic. It is approximated by a
fixed number of fixed-point iterations starting from the ideal volume:
    V <- nRT / (P + a (n/V)^2) + n b
This matches the interactive simulator; no convergence check is made.

Deterministic, pure functions only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple


class GasLawError(ValueError):
    """Raised when invalid inputs are provided to gas-law helpers."""


R_L_ATM = 0.08206  # L·atm/(mol·K)
R_SI = 8.314  # J/(mol·K)
BOLTZMANN = 1.380649e-23  # J/K
AVOGADRO = 6.02214076e23  # 1/mol

VDW_ITERATIONS = 5
MIN_VOLUME_L = 0.1
MIN_PRESSURE_ATM = 0.1

LAW_IDEAL = "ideal"
LAW_VAN_DER_WAALS = "vanderwaals"
GAS_LAWS = (LAW_IDEAL, LAW_VAN_DER_WAALS)


@dataclass(frozen=True)
class GasProperties:
    key: str
    name: str
    molar_mass: float  # g/mol
    vdw_a: float  # L^2·atm/mol^2
    vdw_b: float  # L/mol
    critical_temperature: float  # K
    critical_pressure: float  # atm

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


GASES_V1: Dict[str, GasProperties] = {
    "oxygen": GasProperties("oxygen", "Oxygen", 32.0, 1.382, 0.03186, 154.6, 50.43),
    "nitrogen": GasProperties("nitrogen", "Nitrogen", 28.01, 1.370, 0.0387, 126.2, 33.5),
    "carbon-dioxide": GasProperties("carbon-dioxide", "Carbon Dioxide", 44.01, 3.658, 0.04267, 304.2, 72.8),
    "helium": GasProperties("helium", "Helium", 4.0026, 0.034, 0.0237, 5.2, 2.27),
    "methane": GasProperties("methane", "Methane", 16.04, 2.283, 0.04278, 190.6, 45.8),
}


@dataclass(frozen=True)
class MolecularSpeeds:
    most_probable: float
    mean: float
    rms: float


def _ensure_finite_number(x: float, name: str) -> None:
    if x is None:
        raise GasLawError(f"{name} must not be None.")
    if isinstance(x, float) and (x != x or math.isinf(x)):
        raise GasLawError(f"{name} must be a finite number.")


def _validate_positive(x: float, name: str) -> None:
    _ensure_finite_number(x, name)
    if x <= 0:
        raise GasLawError(f"{name} must be > 0.")


def get_gas(key: str) -> GasProperties:
    k = (key or "").strip().lower().replace(" ", "-").replace("_", "-")
    if k not in GASES_V1:
        raise GasLawError(f"Unknown gas: {key!r}")
    return GASES_V1[k]


def _check_law(law: str) -> str:
    l = (law or "").strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    if l not in GAS_LAWS:
        raise GasLawError(f"Unknown gas law: {law!r} (use 'ideal' or 'vanderwaals').")
    return l


def calculate_volume(n: float, temperature_k: float, pressure_atm: float, law: str = LAW_IDEAL, gas: str = "oxygen") -> float:
    """
    Volume (L) of n mol at T and P.

    ideal:        V = nRT / P
    vanderwaals:  five fixed-point iterations from the ideal volume;
                  a non-positive result is replaced by 0.1 L.
    """
    _validate_positive(n, "n")
    _validate_positive(temperature_k, "temperature_k")
    _validate_positive(pressure_atm, "pressure_atm")
    law = _check_law(law)

    v = (n * R_L_ATM * temperature_k) / pressure_atm
    if law == LAW_IDEAL:
        return v

    g = get_gas(gas)
    for _ in range(VDW_ITERATIONS):
        v = (n * R_L_ATM * temperature_k) / (pressure_atm + g.vdw_a * (n / v) ** 2) + n * g.vdw_b
    return v if v > 0 else MIN_VOLUME_L


def calculate_pressure(n: float, temperature_k: float, volume_l: float, law: str = LAW_IDEAL, gas: str = "oxygen") -> float:
    """
    Pressure (atm) of n mol at T in V.

    ideal:        P = nRT / V
    vanderwaals:  P = nRT / (V - nb) - a (n/V)^2, floored at 0.1 atm
    """
    _validate_positive(n, "n")
    _validate_positive(temperature_k, "temperature_k")
    _validate_positive(volume_l, "volume_l")
    law = _check_law(law)

    if law == LAW_IDEAL:
        return (n * R_L_ATM * temperature_k) / volume_l

    g = get_gas(gas)
    free_volume = volume_l - n * g.vdw_b
    if free_volume <= 0:
        return MIN_PRESSURE_ATM
    p = (n * R_L_ATM * temperature_k) / free_volume - g.vdw_a * (n / volume_l) ** 2
    return p if p > 0 else MIN_PRESSURE_ATM


def molecular_speeds(temperature_k: float, molar_mass_g: float) -> MolecularSpeeds:
    """
    Characteristic Maxwell-Boltzmann speeds (m/s), M converted to kg/mol:
      v_mp   = sqrt(2RT/M)
      v_mean = sqrt(8RT/(pi M))
      v_rms  = sqrt(3RT/M)
    """
    _validate_positive(temperature_k, "temperature_k")
    _validate_positive(molar_mass_g, "molar_mass_g")
    m = molar_mass_g / 1000.0
    return MolecularSpeeds(
        most_probable=math.sqrt(2 * R_SI * temperature_k / m),
        mean=math.sqrt(8 * R_SI * temperature_k / (math.pi * m)),
        rms=math.sqrt(3 * R_SI * temperature_k / m),
    )


def maxwell_boltzmann_pdf(speed: float, molecule_mass_kg: float, temperature_k: float) -> float:
    """
    f(v) = (m / (2 pi k T))^(3/2) * 4 pi v^2 * exp(-m v^2 / (2 k T))
    m is the mass of ONE molecule (kg).
    """
    _validate_positive(molecule_mass_kg, "molecule_mass_kg")
    _validate_positive(temperature_k, "temperature_k")
    kt = BOLTZMANN * temperature_k
    return (
        (molecule_mass_kg / (2 * math.pi * kt)) ** 1.5
        * 4 * math.pi * speed * speed
        * math.exp(-molecule_mass_kg * speed * speed / (2 * kt))
    )


def speed_distribution(temperature_k: float, molar_mass_g: float, points: int = 100) -> List[Tuple[float, float]]:
    """
    Sampled (speed, pdf) pairs from 0 to max(3000, 2 * v_rms) m/s.
    """
    if points < 2:
        raise GasLawError("points must be >= 2.")
    speeds = molecular_speeds(temperature_k, molar_mass_g)
    max_speed = max(3000.0, math.ceil(speeds.rms * 2))
    molecule_mass = (molar_mass_g / 1000.0) / AVOGADRO
    step = max_speed / (points - 1)
    return [
        (i * step, maxwell_boltzmann_pdf(i * step, molecule_mass, temperature_k))
        for i in range(points)
    ]


def partial_pressures(total_pressure_atm: float, fraction_gas1: float) -> Tuple[float, float]:
    """Dalton's law for a binary mixture: p1 = x1 P, p2 = (1 - x1) P."""
    _ensure_finite_number(total_pressure_atm, "total_pressure_atm")
    _ensure_finite_number(fraction_gas1, "fraction_gas1")
    if total_pressure_atm < 0:
        raise GasLawError("total_pressure_atm must be >= 0.")
    if fraction_gas1 < 0 or fraction_gas1 > 1:
        raise GasLawError("fraction_gas1 must be between 0 and 1.")
    return total_pressure_atm * fraction_gas1, total_pressure_atm * (1 - fraction_gas1)
