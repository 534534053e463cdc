"""
State Change v1 — energy / temperature / phase resolver

Energy reference (locked):
- 0 J corresponds to the substance at its melting point, fully solid.
- Below the melting point energy is negative.

Heating curve for mass m (piecewise):
1) Solid:    E = m * c_s * (T - Tm)                      T <= Tm
2) Liquid:   E = m * Lf + m * c_l * (T - Tm)              Tm < T < Tb
3) Gas:      E = m * Lf + m * c_l * (Tb - Tm) + m * Lv
                 + m * c_g * (T - Tb)                     T >= Tb

Energy -> temperature is the inverse on the sloped bands. On the two
plateaus (melting, boiling) the temperature is pinned while energy moves,
so the mapping is many-to-one there.

Phase is always binned from ENERGY, never from temperature: at the
melting point temperature alone cannot tell "solid" from "half melted".

Inputs are assumed pre-validated (mass > 0, finite property values).
Pure functions only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from chemsim.substances_v1 import SubstanceProperties


class Phase(str, Enum):
    SOLID = "solid"
    MELTING = "melting"
    LIQUID = "liquid"
    BOILING = "boiling"
    GAS = "gas"


PHASE_ORDER: Tuple[Phase, ...] = (
    Phase.SOLID,
    Phase.MELTING,
    Phase.LIQUID,
    Phase.BOILING,
    Phase.GAS,
)

# Lower / upper offsets around the phase boundaries used for the energy clamp.
MIN_ENERGY_OFFSET_C = 100.0
MAX_ENERGY_OFFSET_C = 500.0


@dataclass(frozen=True)
class PhaseThresholds:
    """Cumulative energy values (J) where each band starts."""

    fusion_energy: float
    liquid_range: float
    vapor_energy: float

    @property
    def melting_start(self) -> float:
        return 0.0

    @property
    def liquid_start(self) -> float:
        return self.fusion_energy

    @property
    def boiling_start(self) -> float:
        return self.fusion_energy + self.liquid_range

    @property
    def gas_start(self) -> float:
        return self.fusion_energy + self.liquid_range + self.vapor_energy


def phase_thresholds(mass: float, props: SubstanceProperties) -> PhaseThresholds:
    return PhaseThresholds(
        fusion_energy=mass * props.latent_heat_fusion,
        liquid_range=mass * props.heat_capacity_liquid * (props.boiling_point - props.melting_point),
        vapor_energy=mass * props.latent_heat_vaporization,
    )


def energy_at_temperature(temp: float, mass: float, props: SubstanceProperties) -> float:
    """
    Total energy (J) of `mass` grams at `temp` °C, relative to solid at Tm.

    A temperature exactly at the melting point maps to the solid side (0 J);
    exactly at the boiling point maps to the gas side (fully vaporized).
    """
    tm = props.melting_point
    tb = props.boiling_point

    if temp <= tm:
        return mass * props.heat_capacity_solid * (temp - tm)

    if temp < tb:
        return mass * props.latent_heat_fusion + mass * props.heat_capacity_liquid * (temp - tm)

    return (
        mass * props.latent_heat_fusion
        + mass * props.heat_capacity_liquid * (tb - tm)
        + mass * props.latent_heat_vaporization
        + mass * props.heat_capacity_gas * (temp - tb)
    )


def temperature_at_energy(energy: float, mass: float, props: SubstanceProperties) -> float:
    """
    Inverse of energy_at_temperature.

    Bands:
      E < 0                          -> solid, sloped
      0 <= E < fusion                -> melting plateau (T = Tm)
      fusion <= E < fusion + liquid  -> liquid, sloped
      ... < fusion + liquid + vapor  -> boiling plateau (T = Tb)
      otherwise                      -> gas, sloped
    """
    th = phase_thresholds(mass, props)

    if energy < 0:
        return props.melting_point + energy / (mass * props.heat_capacity_solid)
    if energy < th.liquid_start:
        return props.melting_point
    if energy < th.boiling_start:
        return props.melting_point + (energy - th.fusion_energy) / (mass * props.heat_capacity_liquid)
    if energy < th.gas_start:
        return props.boiling_point
    return props.boiling_point + (energy - th.gas_start) / (mass * props.heat_capacity_gas)


def determine_state(temp: float, energy: float, mass: float, props: SubstanceProperties) -> Phase:
    """
    Phase label for the given energy.

    `temp` is accepted for call-site symmetry with the UI contract but the
    decision uses energy only.
    """
    th = phase_thresholds(mass, props)

    if energy < 0:
        return Phase.SOLID
    if energy < th.liquid_start:
        return Phase.MELTING
    if energy < th.boiling_start:
        return Phase.LIQUID
    if energy < th.gas_start:
        return Phase.BOILING
    return Phase.GAS


def energy_bounds(mass: float, props: SubstanceProperties) -> Tuple[float, float]:
    """
    Clamp range for accumulated energy.

    Generous bounds that stop runaway drift; they are not physical limits.
    """
    min_energy = mass * props.heat_capacity_solid * (props.melting_point - MIN_ENERGY_OFFSET_C)
    max_energy = mass * props.heat_capacity_gas * (props.boiling_point + MAX_ENERGY_OFFSET_C)
    return min_energy, max_energy


def phase_rank(phase: Phase) -> int:
    return PHASE_ORDER.index(Phase(phase))


def format_energy(joules: float) -> str:
    if joules > 1000:
        return f"{joules / 1000:.2f} kJ"
    return f"{joules:.2f} J"
