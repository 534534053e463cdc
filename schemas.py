from typing import Any, Dict, List, Literal, Optional, Tuple
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config import (
    STATE_CHANGE_DEFAULT_INTERVAL_MS,
    STATE_CHANGE_MAX_INTERVAL_MS,
    STATE_CHANGE_MAX_MASS_G,
    STATE_CHANGE_MAX_RATE_W,
    STATE_CHANGE_MIN_INTERVAL_MS,
    STATE_CHANGE_MIN_MASS_G,
    STATE_CHANGE_MIN_RATE_W,
)

DirectionCommand = Literal["heat", "cool", "stop"]
GasLawName = Literal["ideal", "vanderwaals"]


_WHITESPACE_RE = re.compile(r"\s+")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Stateless resolve inputs stay finite and physical.
ABSOLUTE_ZERO_C = -273.15
RESOLVE_MAX_TEMPERATURE_C = 10000.0
RESOLVE_MAX_ABS_ENERGY_J = 1e9


def _clean_text(s: str) -> str:
    # Remove control chars, trim, collapse whitespace.
    s = _CONTROL_RE.sub("", s)
    s = s.strip()
    s = _WHITESPACE_RE.sub(" ", s)
    return s


# ============================================================================
# Catalog (camelCase on the wire, matching the web client)
# ============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsertCategory(_CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    icon: str = Field(..., min_length=1, max_length=40)
    slug: str = Field(..., min_length=1, max_length=80)
    description: str = Field(..., max_length=400)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str):
        v = _clean_text(v).lower()
        if not _SLUG_RE.match(v):
            raise ValueError("slug must be lowercase words joined by '-'")
        return v


class Category(InsertCategory):
    id: int


class InsertSimulation(_CamelModel):
    title: str = Field(..., min_length=1, max_length=160)
    description: str = Field(..., max_length=600)
    slug: str = Field(..., min_length=1, max_length=80)
    category: str = Field(..., min_length=1, max_length=80)
    image_url: str = Field(..., max_length=600)
    duration: str = Field(..., max_length=40)
    difficulty: str = Field(..., max_length=40)
    is_featured: bool = False
    is_new: bool = False
    is_popular: bool = False
    path: str = Field(..., max_length=200)

    @field_validator("title", "description", "duration", "difficulty", mode="before")
    @classmethod
    def validate_text_fields(cls, v):
        if v is None:
            return v
        return _clean_text(str(v))

    @field_validator("slug", "category")
    @classmethod
    def validate_slug(cls, v: str):
        v = _clean_text(v).lower()
        if not _SLUG_RE.match(v):
            raise ValueError("slug must be lowercase words joined by '-'")
        return v


class Simulation(InsertSimulation):
    id: int


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# State change simulator
# ============================================================================

class SubstanceOut(BaseModel):
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


class ResolveRequest(BaseModel):
    substance: str = Field("Water", min_length=1, max_length=40)
    mass: float = Field(100.0, ge=STATE_CHANGE_MIN_MASS_G, le=STATE_CHANGE_MAX_MASS_G)
    temperature: Optional[float] = Field(
        None,
        ge=ABSOLUTE_ZERO_C,
        le=RESOLVE_MAX_TEMPERATURE_C,
        allow_inf_nan=False,
        description="°C; give this OR energy",
    )
    energy: Optional[float] = Field(
        None,
        ge=-RESOLVE_MAX_ABS_ENERGY_J,
        le=RESOLVE_MAX_ABS_ENERGY_J,
        allow_inf_nan=False,
        description="J relative to solid at the melting point",
    )

    @model_validator(mode="after")
    def exactly_one_input(self):
        if (self.temperature is None) == (self.energy is None):
            raise ValueError("provide exactly one of 'temperature' or 'energy'")
        return self


class ResolveResponse(BaseModel):
    substance: str
    mass: float
    energy: float
    temperature: float
    phase: str
    energy_display: str


class SessionCreateRequest(BaseModel):
    substance: str = Field("Water", min_length=1, max_length=40)
    mass: float = Field(100.0, ge=STATE_CHANGE_MIN_MASS_G, le=STATE_CHANGE_MAX_MASS_G)
    heating_rate: float = Field(500.0, ge=STATE_CHANGE_MIN_RATE_W, le=STATE_CHANGE_MAX_RATE_W)
    interval_ms: int = Field(
        STATE_CHANGE_DEFAULT_INTERVAL_MS,
        ge=STATE_CHANGE_MIN_INTERVAL_MS,
        le=STATE_CHANGE_MAX_INTERVAL_MS,
    )

    model_config = {"extra": "ignore"}


class SessionUpdateRequest(BaseModel):
    substance: Optional[str] = Field(None, min_length=1, max_length=40)
    mass: Optional[float] = Field(None, ge=STATE_CHANGE_MIN_MASS_G, le=STATE_CHANGE_MAX_MASS_G)
    heating_rate: Optional[float] = Field(None, ge=STATE_CHANGE_MIN_RATE_W, le=STATE_CHANGE_MAX_RATE_W)
    interval_ms: Optional[int] = Field(None, ge=STATE_CHANGE_MIN_INTERVAL_MS, le=STATE_CHANGE_MAX_INTERVAL_MS)

    model_config = {"extra": "ignore"}


class CommandRequest(BaseModel):
    direction: DirectionCommand

    @field_validator("direction", mode="before")
    @classmethod
    def _lower(cls, v):
        return _clean_text(str(v)).lower() if v is not None else v


class TickRequest(BaseModel):
    ticks: int = Field(1, ge=1)
    interval_ms: Optional[int] = Field(None, ge=1)


class SessionSnapshot(BaseModel):
    session_id: str
    substance: str
    mass: float
    heating_rate_power: float
    direction: str
    interval_ms: int
    energy: float
    energy_display: str
    temperature: float
    temperature_display: float
    phase: str
    tick_count: int
    elapsed_ms: float
    saturation: Optional[str] = None
    clock_running: bool = False


# ============================================================================
# Lab: gas laws, calculators, battery
# ============================================================================

class GasVolumeRequest(BaseModel):
    gas: str = "oxygen"
    law: GasLawName = "ideal"
    moles: float = Field(1.0, gt=0)
    temperature_k: float = Field(300.0, gt=0)
    pressure_atm: float = Field(1.0, gt=0)


class GasPressureRequest(BaseModel):
    gas: str = "oxygen"
    law: GasLawName = "ideal"
    moles: float = Field(1.0, gt=0)
    temperature_k: float = Field(300.0, gt=0)
    volume_l: float = Field(24.4, gt=0)


class GasSpeedsRequest(BaseModel):
    gas: str = "oxygen"
    temperature_k: float = Field(300.0, gt=0)
    include_distribution: bool = False


class GasSpeedsResponse(BaseModel):
    gas: str
    temperature_k: float
    most_probable: float
    mean: float
    rms: float
    distribution: List[Tuple[float, float]] = Field(default_factory=list)


class GasMixtureRequest(BaseModel):
    gas1: str = "oxygen"
    gas2: str = "nitrogen"
    total_pressure_atm: float = Field(1.0, ge=0)
    fraction_gas1: float = Field(0.5, ge=0, le=1)


class CalculatorRequest(BaseModel):
    # Free-form numeric inputs; each calculator reads the names it needs.
    inputs: Dict[str, float] = Field(default_factory=dict)
    target: Optional[str] = Field(None, max_length=40)
    operation: Optional[str] = Field(None, max_length=20)


class CalculatorResponse(BaseModel):
    calculator: str
    result: Any
    details: Dict[str, Any] = Field(default_factory=dict)


class BatteryCircuitRequest(BaseModel):
    battery_type: str = "alkaline"
    load_type: str = "led"
    load_resistance: Optional[float] = Field(None, ge=0)
    series_count: int = Field(1, ge=1, le=10)
    charge_pct: float = Field(100.0, ge=0, le=100)
    circuit_closed: bool = True


class BatteryDischargeRequest(BatteryCircuitRequest):
    seconds: int = Field(1, ge=0)


class BatteryCircuitResponse(BaseModel):
    battery_type: str
    load_resistance: float
    series_count: int
    charge_pct: float
    circuit_closed: bool
    total_voltage: float
    total_internal_resistance: float
    current_ma: float
    power_w: float
    elapsed_s: int = 0
    remaining_s: Optional[int] = None
