# session_store.py
"""In-memory registry of state-change simulation sessions.

Each session owns one SimulationState and (optionally) one ClockDriver
thread ticking it. Nothing is persisted; sessions disappear with the
process, on DELETE, or once they have been idle (not read or driven)
for STATE_CHANGE_SESSION_TTL_SECONDS.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from chemsim.simulation_clock_v1 import ClockDriver, SimulationState, new_state, snapshot
from config import (
    STATE_CHANGE_AUTO_STOP_ON_SATURATION,
    STATE_CHANGE_BACKGROUND_CLOCK,
    STATE_CHANGE_MAX_SESSIONS,
    STATE_CHANGE_SESSION_TTL_SECONDS,
)

logger = logging.getLogger("chemsim-engine-api")


class SessionNotFound(KeyError):
    pass


class SessionLimitError(RuntimeError):
    pass


@dataclass
class SimulationSession:
    session_id: str
    state: SimulationState
    driver: Optional[ClockDriver] = None
    created_at: float = field(default_factory=time.time)
    last_seen: float = field(default_factory=time.time)

    def touch(self) -> None:
        self.last_seen = time.time()

    def idle_seconds(self, now: Optional[float] = None) -> float:
        return (time.time() if now is None else now) - self.last_seen

    def to_dict(self) -> Dict[str, object]:
        out = snapshot(self.state)
        out["session_id"] = self.session_id
        out["clock_running"] = bool(self.driver and self.driver.running)
        return out


_SESSIONS: Dict[str, SimulationSession] = {}
_LOCK = threading.Lock()


def _pop_expired(now: float) -> List[SimulationSession]:
    # Caller holds _LOCK. TTL <= 0 disables expiry.
    ttl = STATE_CHANGE_SESSION_TTL_SECONDS
    if ttl <= 0:
        return []
    expired = [s for s in _SESSIONS.values() if s.idle_seconds(now) >= ttl]
    for sess in expired:
        del _SESSIONS[sess.session_id]
    return expired


def _stop_expired(expired: List[SimulationSession], now: float) -> None:
    for sess in expired:
        if sess.driver is not None:
            sess.driver.stop()
        logger.info(
            "session_store: expired %s (idle %.0fs, age %.0fs)",
            sess.session_id,
            sess.idle_seconds(now),
            now - sess.created_at,
        )


def expire_idle_sessions() -> int:
    """Drop sessions idle for longer than the TTL and stop their clocks. Returns how many went."""
    now = time.time()
    with _LOCK:
        expired = _pop_expired(now)
    _stop_expired(expired, now)
    return len(expired)


def create_session(
    substance: str,
    mass: float,
    heating_rate: float,
    interval_ms: int,
    background_clock: Optional[bool] = None,
) -> SimulationSession:
    """Create a session at the 20 °C baseline. Raises UnknownSubstanceError / SessionLimitError."""
    state = new_state(substance, mass=mass, heating_rate_power=heating_rate, interval_ms=interval_ms)

    now = time.time()
    sess = None
    with _LOCK:
        expired = _pop_expired(now)
        if len(_SESSIONS) < STATE_CHANGE_MAX_SESSIONS:
            sid = uuid.uuid4().hex
            sess = SimulationSession(session_id=sid, state=state, created_at=now, last_seen=now)
            _SESSIONS[sid] = sess
    _stop_expired(expired, now)
    if sess is None:
        raise SessionLimitError(f"session limit reached ({STATE_CHANGE_MAX_SESSIONS})")

    use_clock = STATE_CHANGE_BACKGROUND_CLOCK if background_clock is None else background_clock
    if use_clock:
        sess.driver = ClockDriver(
            state,
            auto_stop_on_saturation=STATE_CHANGE_AUTO_STOP_ON_SATURATION,
            name=f"state-change-clock-{sid[:8]}",
        )
        sess.driver.start()

    logger.info("session_store: created %s (%s, %.1f g)", sid, state.substance.name, state.mass)
    return sess


def get_session(session_id: str) -> SimulationSession:
    with _LOCK:
        sess = _SESSIONS.get(session_id)
    if sess is None:
        raise SessionNotFound(session_id)
    sess.touch()
    return sess


def list_sessions() -> List[SimulationSession]:
    with _LOCK:
        return list(_SESSIONS.values())


def delete_session(session_id: str) -> None:
    with _LOCK:
        sess = _SESSIONS.pop(session_id, None)
    if sess is None:
        raise SessionNotFound(session_id)
    if sess.driver is not None:
        sess.driver.stop()
    logger.info("session_store: deleted %s", session_id)


def shutdown() -> None:
    """Stop every clock and forget all sessions."""
    with _LOCK:
        sessions = list(_SESSIONS.values())
        _SESSIONS.clear()
    for sess in sessions:
        if sess.driver is not None:
            sess.driver.stop()
    if sessions:
        logger.info("session_store: stopped %s session(s)", len(sessions))
