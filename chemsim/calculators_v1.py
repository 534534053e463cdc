# chemsim/calculators_v1.py
# General Chemistry v1 – quick calculators (school level)
# LOCKED MODE: additive only

from __future__ import annotations

from dataclasses import dataclass
from typing import List


class CalculatorError(ValueError):
    """Raised when invalid inputs are provided to a calculator."""


AVOGADRO_V1 = 6.022e23
MOLAR_VOLUME_STP = 22.4  # L/mol at 273 K, 1 atm
STP_TEMPERATURE = 273.0
PH_NEUTRAL = 7.0
PH_HARMFUL_DISTANCE = 3.0

ORBITAL_LETTERS = {0: "s", 1: "p", 2: "d", 3: "f"}


def raoult_total_vapour_pressure(p0_1, x1, p0_2, x2):
    """
    P_total = P1° * X1 + P2° * X2
    """
    if p0_1 < 0 or p0_2 < 0:
        raise CalculatorError("Vapour pressures cannot be negative")
    if not (0 <= x1 <= 1) or not (0 <= x2 <= 1):
        raise CalculatorError("Mole fractions must be between 0 and 1")
    return p0_1 * x1 + p0_2 * x2


def ideal_gas_solve(target, p=1.0, v=22.4, n=1.0, t=273.0, r=0.0):
    """
    PV = nRT, solve for one quantity.

    target: "pv" | "pressure" | "volume" | "moles" | "temperature"
    r == 0 means "use 22.4/273" (L·atm/(mol·K) at STP, rounded molar volume).
    """
    r_value = MOLAR_VOLUME_STP / STP_TEMPERATURE if r == 0 else r
    target = (target or "").strip().lower()

    if target == "pv":
        return n * r_value * t
    if target == "pressure":
        if v == 0:
            raise CalculatorError("Volume must be non-zero")
        return n * r_value * t / v
    if target == "volume":
        if p == 0:
            raise CalculatorError("Pressure must be non-zero")
        return n * r_value * t / p
    if target == "moles":
        if t == 0:
            raise CalculatorError("Temperature must be non-zero")
        return p * v / (r_value * t)
    if target == "temperature":
        if n == 0:
            raise CalculatorError("Moles must be non-zero")
        return p * v / (n * r_value)
    raise CalculatorError(f"Unknown ideal gas target: {target!r}")


def average_atomic_mass(mass1, abundance1_pct, mass2, abundance2_pct):
    """
    Two-isotope weighted mean:
    A = (m1 * a1 + m2 * a2) / 100   (abundances in %)
    """
    if mass1 < 0 or mass2 < 0:
        raise CalculatorError("Isotope masses cannot be negative")
    if not (0 <= abundance1_pct <= 100) or not (0 <= abundance2_pct <= 100):
        raise CalculatorError("Abundances must be between 0 and 100")
    return (mass1 * abundance1_pct + mass2 * abundance2_pct) / 100


def avogadro_convert(value, operation="multiply"):
    """
    multiply: moles -> particles
    divide:   particles -> moles
    """
    if operation == "multiply":
        return value * AVOGADRO_V1
    if operation == "divide":
        return value / AVOGADRO_V1
    raise CalculatorError("operation must be 'multiply' or 'divide'")


@dataclass(frozen=True)
class PHCheck:
    ph: float
    distance_from_neutral: float
    harmful: bool
    nature: str


def ph_check(ph):
    """
    Body-safety check: |pH - 7| >= 3 is flagged as potentially harmful.
    """
    if ph != ph or ph < 0 or ph > 14:
        raise CalculatorError("pH must be between 0 and 14")
    distance = abs(ph - PH_NEUTRAL)
    if ph < PH_NEUTRAL:
        nature = "acidic"
    elif ph > PH_NEUTRAL:
        nature = "basic"
    else:
        nature = "neutral"
    return PHCheck(ph=ph, distance_from_neutral=distance, harmful=distance >= PH_HARMFUL_DISTANCE, nature=nature)


def percentage_yield(actual, theoretical):
    """
    % yield = actual / theoretical * 100
    """
    if theoretical <= 0 or actual < 0:
        raise CalculatorError("Theoretical yield must be > 0 and actual yield >= 0")
    return actual / theoretical * 100


def molarity(target, molarity_m=0.0, moles=0.0, volume_l=0.0):
    """
    M = n / V, solve for one of:
    target: "molarity" | "moles" | "volume"
    """
    target = (target or "").strip().lower()
    if target == "molarity":
        if volume_l <= 0:
            raise CalculatorError("Volume must be positive")
        return moles / volume_l
    if target == "moles":
        return molarity_m * volume_l
    if target == "volume":
        if molarity_m <= 0:
            raise CalculatorError("Molarity must be positive")
        return moles / molarity_m
    raise CalculatorError(f"Unknown molarity target: {target!r}")


def molarity_from_density(target, molarity_m=0.0, density=0.0, percent=0.0, molar_mass=0.0):
    """
    M = d * % * 10 / Ma   (d in g/mL, % by mass, Ma in g/mol)

    target: "molarity" | "percent" | "density" | "molar_mass"
    """
    target = (target or "").strip().lower()
    if target == "molarity":
        if molar_mass <= 0:
            raise CalculatorError("Molar mass must be positive")
        return density * percent * 10 / molar_mass
    if target == "percent":
        if density <= 0:
            raise CalculatorError("Density must be positive")
        return molarity_m * molar_mass / (density * 10)
    if target == "density":
        if percent <= 0:
            raise CalculatorError("Percent must be positive")
        return molarity_m * molar_mass / (percent * 10)
    if target == "molar_mass":
        if molarity_m <= 0:
            raise CalculatorError("Molarity must be positive")
        return density * percent * 10 / molarity_m
    raise CalculatorError(f"Unknown density-molarity target: {target!r}")


def orbital_name(l):
    return ORBITAL_LETTERS.get(l, f"l={l}")


def minimum_n_for_l(l):
    if l < 0:
        raise CalculatorError("l must be non-negative")
    return l + 1


def possible_l_values(n) -> List[int]:
    if n <= 0:
        raise CalculatorError("n must be a positive integer")
    return list(range(n))


def possible_ml_values(l) -> List[int]:
    if l < 0:
        raise CalculatorError("l must be non-negative")
    return list(range(-l, l + 1))


def check_quantum_numbers(n, l, ml):
    """
    Returns (valid, reason). Rules:
    n >= 1, 0 <= l <= n-1, -l <= ml <= l
    """
    if n <= 0:
        return False, "n must be a positive integer"
    if l < 0 or l >= n:
        return False, f"For n = {n}, l must be between 0 and {n - 1}"
    if ml < -l or ml > l:
        return False, f"For l = {l}, ml must be between -{l} and {l}"
    return True, f"Valid quantum numbers: n = {n}, l = {l}, ml = {ml}"
