"""
Substances v1 — physical property table for the state-change simulator

Each entry holds the constants needed to map heat energy to temperature
and phase for a fixed mass of a pure substance.

Units:
- Temperatures in °C
- Heat capacities in J/(g·°C)
- Latent heats in J/g
- Molar mass in g/mol, densities in g/cm^3 (informational only)

Deterministic data only. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, List


class UnknownSubstanceError(KeyError):
    """Raised when a substance name is not in the property table."""


class SubstancePropertiesError(ValueError):
    """Raised when a property record violates the table invariants."""


@dataclass(frozen=True)
class SubstanceProperties:
    name: str
    formula: str
    melting_point: float
    boiling_point: float
    heat_capacity_solid: float
    heat_capacity_liquid: float
    heat_capacity_gas: float
    latent_heat_fusion: float
    latent_heat_vaporization: float
    molar_mass: float
    density_solid: float
    density_liquid: float
    density_gas: float

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


SUBSTANCES_V1: Dict[str, SubstanceProperties] = {
    "Water": SubstanceProperties(
        name="Water",
        formula="H2O",
        melting_point=0.0,
        boiling_point=100.0,
        heat_capacity_solid=2.108,  # ice
        heat_capacity_liquid=4.18,
        heat_capacity_gas=2.0,  # steam, approx
        latent_heat_fusion=333.55,
        latent_heat_vaporization=2257.0,
        molar_mass=18.01528,
        density_solid=0.9167,
        density_liquid=1.0,
        density_gas=0.0006,  # approx at 100 °C
    ),
    "Iron": SubstanceProperties(
        name="Iron",
        formula="Fe",
        melting_point=1538.0,
        boiling_point=2862.0,
        heat_capacity_solid=0.449,
        heat_capacity_liquid=0.82,
        heat_capacity_gas=0.9,
        latent_heat_fusion=247.0,
        latent_heat_vaporization=6090.0,
        molar_mass=55.845,
        density_solid=7.874,
        density_liquid=6.98,
        density_gas=0.005,
    ),
    "Nitrogen": SubstanceProperties(
        name="Nitrogen",
        formula="N2",
        melting_point=-210.0,
        boiling_point=-196.0,
        heat_capacity_solid=1.04,
        heat_capacity_liquid=2.04,
        heat_capacity_gas=1.04,
        latent_heat_fusion=25.7,
        latent_heat_vaporization=199.0,
        molar_mass=28.0134,
        density_solid=1.026,
        density_liquid=0.808,
        density_gas=0.00125,
    ),
}

DEFAULT_SUBSTANCE = "Water"


def validate_properties(props: SubstanceProperties) -> None:
    """
    Check the invariants every record must satisfy:
    - melting_point < boiling_point
    - all heat capacities > 0
    - latent heats >= 0
    """
    if not props.melting_point < props.boiling_point:
        raise SubstancePropertiesError(
            f"{props.name}: melting_point must be below boiling_point."
        )
    for field_name in ("heat_capacity_solid", "heat_capacity_liquid", "heat_capacity_gas"):
        if getattr(props, field_name) <= 0:
            raise SubstancePropertiesError(f"{props.name}: {field_name} must be > 0.")
    for field_name in ("latent_heat_fusion", "latent_heat_vaporization"):
        if getattr(props, field_name) < 0:
            raise SubstancePropertiesError(f"{props.name}: {field_name} must be >= 0.")


def get_substance(name: str) -> SubstanceProperties:
    """Case-insensitive lookup by substance name."""
    key = (name or "").strip().lower()
    for sname, props in SUBSTANCES_V1.items():
        if sname.lower() == key:
            return props
    raise UnknownSubstanceError(name)


def list_substances() -> List[SubstanceProperties]:
    return list(SUBSTANCES_V1.values())


for _props in SUBSTANCES_V1.values():
    validate_properties(_props)
