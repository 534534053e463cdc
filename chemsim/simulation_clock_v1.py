"""
Simulation Clock v1 — fixed-tick driver for the state-change simulator

One SimulationState per session. It is the single owner of the thermal
state; every mutation (tick or user command) happens under its lock, so a
substance/mass change can never interleave with a tick's read of energy.

Per tick (Δt in ms):
1) direction == IDLE -> no-op
2) E' = E + direction * rate * Δt / 1000
3) clamp E' to energy_bounds(mass, props)
4) T = temperature_at_energy(E'), phase = determine_state(T, E')
5) commit (E', T, phase) together

Temperature and phase are re-derived from energy on every tick; they are
never integrated on their own.

Saturation (E' pinned at a clamp bound) is reported on the TickResult.
Whether it also switches the direction to IDLE is a caller policy
(`auto_stop_on_saturation`), off by default.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Dict, Optional, Union

from chemsim.state_change_v1 import (
    Phase,
    determine_state,
    energy_at_temperature,
    energy_bounds,
    format_energy,
    temperature_at_energy,
)
from chemsim.substances_v1 import SubstanceProperties, get_substance

logger = logging.getLogger("chemsim-engine-api")

ROOM_TEMPERATURE_C = 20.0
DEFAULT_INTERVAL_MS = 50
DEFAULT_MASS_G = 100.0
DEFAULT_HEATING_RATE_W = 500.0

SATURATION_MIN = "min"
SATURATION_MAX = "max"


class StateChangeError(ValueError):
    """Raised when a command carries an invalid value."""


class Direction(IntEnum):
    COOLING = -1
    IDLE = 0
    HEATING = 1

    @classmethod
    def from_command(cls, command: Union[str, int, "Direction"]) -> "Direction":
        """Accept heat/cool/stop style commands as well as -1/0/1."""
        if isinstance(command, Direction):
            return command
        if isinstance(command, int):
            try:
                return cls(command)
            except ValueError:
                raise StateChangeError(f"Unknown direction: {command!r}") from None

        c = (command or "").strip().lower()
        if c in {"heat", "heating", "+1", "1"}:
            return cls.HEATING
        if c in {"cool", "cooling", "-1"}:
            return cls.COOLING
        if c in {"stop", "idle", "0", "steady"}:
            return cls.IDLE
        raise StateChangeError(f"Unknown direction: {command!r}")

    @property
    def label(self) -> str:
        return {Direction.COOLING: "cooling", Direction.IDLE: "idle", Direction.HEATING: "heating"}[self]


@dataclass
class SimulationState:
    substance: SubstanceProperties
    mass: float
    heating_rate_power: float
    direction: Direction = Direction.IDLE
    energy: float = 0.0
    temperature: float = ROOM_TEMPERATURE_C
    phase: Phase = Phase.LIQUID
    interval_ms: int = DEFAULT_INTERVAL_MS
    tick_count: int = 0
    elapsed_ms: float = 0.0
    saturation: Optional[str] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)


@dataclass(frozen=True)
class TickResult:
    advanced: bool
    energy: float
    temperature: float
    phase: Phase
    saturation: Optional[str] = None
    auto_stopped: bool = False


def _resolve_substance(substance: Union[str, SubstanceProperties]) -> SubstanceProperties:
    if isinstance(substance, SubstanceProperties):
        return substance
    return get_substance(substance)


def _reset_to_baseline(state: SimulationState) -> None:
    state.temperature = ROOM_TEMPERATURE_C
    state.energy = energy_at_temperature(ROOM_TEMPERATURE_C, state.mass, state.substance)
    state.phase = determine_state(state.temperature, state.energy, state.mass, state.substance)
    state.direction = Direction.IDLE
    state.saturation = None


def new_state(
    substance: Union[str, SubstanceProperties],
    mass: float = DEFAULT_MASS_G,
    heating_rate_power: float = DEFAULT_HEATING_RATE_W,
    interval_ms: int = DEFAULT_INTERVAL_MS,
) -> SimulationState:
    """Create a session state resting at room temperature (20 °C), idle."""
    if mass <= 0:
        raise StateChangeError("mass must be > 0.")
    if heating_rate_power <= 0:
        raise StateChangeError("heating_rate_power must be > 0.")
    if interval_ms <= 0:
        raise StateChangeError("interval_ms must be > 0.")

    state = SimulationState(
        substance=_resolve_substance(substance),
        mass=float(mass),
        heating_rate_power=float(heating_rate_power),
        interval_ms=int(interval_ms),
    )
    _reset_to_baseline(state)
    return state


def tick(
    state: SimulationState,
    interval_ms: Optional[float] = None,
    auto_stop_on_saturation: bool = False,
) -> TickResult:
    """Advance the state by one tick. Atomic with respect to commands."""
    with state.lock:
        if state.direction == Direction.IDLE:
            return TickResult(
                advanced=False,
                energy=state.energy,
                temperature=state.temperature,
                phase=state.phase,
                saturation=state.saturation,
            )

        dt_ms = state.interval_ms if interval_ms is None else interval_ms
        props = state.substance
        mass = state.mass

        new_energy = state.energy + int(state.direction) * state.heating_rate_power * (dt_ms / 1000.0)

        min_energy, max_energy = energy_bounds(mass, props)
        saturation: Optional[str] = None
        if new_energy <= min_energy:
            new_energy = min_energy
            saturation = SATURATION_MIN
        elif new_energy >= max_energy:
            new_energy = max_energy
            saturation = SATURATION_MAX

        new_temp = temperature_at_energy(new_energy, mass, props)
        new_phase = determine_state(new_temp, new_energy, mass, props)

        state.energy = new_energy
        state.temperature = new_temp
        state.phase = new_phase
        state.saturation = saturation
        state.tick_count += 1
        state.elapsed_ms += dt_ms

        auto_stopped = False
        if saturation and auto_stop_on_saturation:
            state.direction = Direction.IDLE
            auto_stopped = True

        return TickResult(
            advanced=True,
            energy=new_energy,
            temperature=new_temp,
            phase=new_phase,
            saturation=saturation,
            auto_stopped=auto_stopped,
        )


def advance(
    state: SimulationState,
    ticks: int,
    interval_ms: Optional[float] = None,
    auto_stop_on_saturation: bool = False,
) -> TickResult:
    """Run `ticks` ticks back to back and return the last result."""
    if ticks < 1:
        raise StateChangeError("ticks must be >= 1.")
    result = None
    for _ in range(ticks):
        result = tick(state, interval_ms=interval_ms, auto_stop_on_saturation=auto_stop_on_saturation)
    return result


# -----------------------------
# commands
# -----------------------------

def set_direction(state: SimulationState, direction: Union[str, int, Direction]) -> None:
    d = Direction.from_command(direction)
    with state.lock:
        state.direction = d
        if d == Direction.IDLE:
            state.saturation = None


def set_substance(state: SimulationState, substance: Union[str, SubstanceProperties]) -> None:
    """Switch substance. Resets to the 20 °C baseline and stops heating/cooling."""
    props = _resolve_substance(substance)
    with state.lock:
        state.substance = props
        _reset_to_baseline(state)


def set_mass(state: SimulationState, mass: float) -> None:
    """
    Change mass keeping the current temperature.

    Energy is recomputed for the new mass at the current temperature and the
    phase re-derived from it; nothing is reset.
    """
    if mass <= 0:
        raise StateChangeError("mass must be > 0.")
    with state.lock:
        state.mass = float(mass)
        state.energy = energy_at_temperature(state.temperature, state.mass, state.substance)
        state.temperature = temperature_at_energy(state.energy, state.mass, state.substance)
        state.phase = determine_state(state.temperature, state.energy, state.mass, state.substance)
        state.saturation = None


def set_heating_rate(state: SimulationState, heating_rate_power: float) -> None:
    if heating_rate_power <= 0:
        raise StateChangeError("heating_rate_power must be > 0.")
    with state.lock:
        state.heating_rate_power = float(heating_rate_power)


def set_interval(state: SimulationState, interval_ms: int) -> None:
    if interval_ms <= 0:
        raise StateChangeError("interval_ms must be > 0.")
    with state.lock:
        state.interval_ms = int(interval_ms)


def snapshot(state: SimulationState) -> Dict[str, Any]:
    with state.lock:
        return {
            "substance": state.substance.name,
            "mass": state.mass,
            "heating_rate_power": state.heating_rate_power,
            "direction": state.direction.label,
            "interval_ms": state.interval_ms,
            "energy": state.energy,
            "energy_display": format_energy(state.energy),
            "temperature": state.temperature,
            "temperature_display": round(state.temperature, 2),
            "phase": state.phase.value,
            "tick_count": state.tick_count,
            "elapsed_ms": state.elapsed_ms,
            "saturation": state.saturation,
        }


# -----------------------------
# background driver
# -----------------------------

class ClockDriver:
    """
    Runs `tick` on a fixed schedule in a daemon thread.

    The interval is re-read from the state before every wait, so
    set_interval() takes effect on the next tick. stop() is the only way to
    end the loop; an idle state simply produces no-op ticks.
    """

    def __init__(
        self,
        state: SimulationState,
        auto_stop_on_saturation: bool = False,
        on_tick: Optional[Callable[[TickResult], None]] = None,
        name: str = "state-change-clock",
    ) -> None:
        self.state = state
        self.auto_stop_on_saturation = auto_stop_on_saturation
        self.on_tick = on_tick
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> TickResult:
        result = tick(self.state, auto_stop_on_saturation=self.auto_stop_on_saturation)
        if result.advanced and self.on_tick is not None:
            self.on_tick(result)
        return result

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.state.interval_ms / 1000.0):
            try:
                self.run_once()
            except Exception:
                logger.exception("%s: tick failed, stopping clock", self.name)
                self._stop.set()
                raise
