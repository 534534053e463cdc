"""
state_change_router.py
----------------------

HTTP surface of the state-change (heating curve) simulator.

A client creates a session, sends heat / cool / stop commands and polls
the snapshot, which carries the (temperature, phase, energy) triple of the
latest tick. With the background clock disabled the client advances time
itself through POST /sessions/{id}/tick.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

import session_store
from chemsim.simulation_clock_v1 import (
    StateChangeError,
    advance,
    set_direction,
    set_heating_rate,
    set_interval,
    set_mass,
    set_substance,
)
from chemsim.state_change_v1 import (
    determine_state,
    energy_at_temperature,
    format_energy,
    temperature_at_energy,
)
from chemsim.substances_v1 import UnknownSubstanceError, get_substance, list_substances
from config import STATE_CHANGE_AUTO_STOP_ON_SATURATION, STATE_CHANGE_MAX_TICKS_PER_REQUEST
from schemas import (
    CommandRequest,
    MessageResponse,
    ResolveRequest,
    ResolveResponse,
    SessionCreateRequest,
    SessionSnapshot,
    SessionUpdateRequest,
    SubstanceOut,
    TickRequest,
)

logger = logging.getLogger("chemsim-engine-api")

router = APIRouter(prefix="/api/state-change", tags=["state-change"])

_ERRORS = {
    400: {"model": MessageResponse},
    404: {"model": MessageResponse},
}


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.get("/substances", response_model=List[SubstanceOut])
def substances():
    return [p.to_dict() for p in list_substances()]


@router.post("/resolve", response_model=ResolveResponse, responses=_ERRORS)
def resolve(req: ResolveRequest):
    """Stateless conversion: temperature -> energy or energy -> temperature, plus phase."""
    try:
        props = get_substance(req.substance)
    except UnknownSubstanceError:
        return _message(404, "Substance not found")

    if req.temperature is not None:
        energy = energy_at_temperature(req.temperature, req.mass, props)
    else:
        energy = req.energy
    temp = temperature_at_energy(energy, req.mass, props)
    phase = determine_state(temp, energy, req.mass, props)

    return {
        "substance": props.name,
        "mass": req.mass,
        "energy": energy,
        "temperature": temp,
        "phase": phase.value,
        "energy_display": format_energy(energy),
    }


@router.post("/sessions", status_code=201, response_model=SessionSnapshot, responses={**_ERRORS, 503: {"model": MessageResponse}})
def create_session(req: SessionCreateRequest):
    try:
        sess = session_store.create_session(
            substance=req.substance,
            mass=req.mass,
            heating_rate=req.heating_rate,
            interval_ms=req.interval_ms,
        )
    except UnknownSubstanceError:
        return _message(404, "Substance not found")
    except session_store.SessionLimitError as e:
        logger.warning("state-change: %s", e)
        return _message(503, "Too many active simulations, try again later")
    except StateChangeError as e:
        return _message(400, str(e))
    return sess.to_dict()


@router.get("/sessions/{session_id}", response_model=SessionSnapshot, responses=_ERRORS)
def get_session(session_id: str):
    try:
        sess = session_store.get_session(session_id)
    except session_store.SessionNotFound:
        return _message(404, "Session not found")
    return sess.to_dict()


@router.post("/sessions/{session_id}/command", response_model=SessionSnapshot, responses=_ERRORS)
def command(session_id: str, req: CommandRequest):
    try:
        sess = session_store.get_session(session_id)
    except session_store.SessionNotFound:
        return _message(404, "Session not found")

    set_direction(sess.state, req.direction)
    return sess.to_dict()


@router.patch("/sessions/{session_id}", response_model=SessionSnapshot, responses=_ERRORS)
def update_session(session_id: str, req: SessionUpdateRequest):
    """
    Apply parameter changes in a fixed order: substance (resets to 20 °C),
    then mass, heating rate, interval.
    """
    try:
        sess = session_store.get_session(session_id)
    except session_store.SessionNotFound:
        return _message(404, "Session not found")

    state = sess.state
    try:
        with state.lock:
            if req.substance is not None:
                set_substance(state, req.substance)
            if req.mass is not None:
                set_mass(state, req.mass)
            if req.heating_rate is not None:
                set_heating_rate(state, req.heating_rate)
            if req.interval_ms is not None:
                set_interval(state, req.interval_ms)
    except UnknownSubstanceError:
        return _message(404, "Substance not found")
    except StateChangeError as e:
        return _message(400, str(e))
    return sess.to_dict()


@router.post("/sessions/{session_id}/tick", response_model=SessionSnapshot, responses=_ERRORS)
def tick_session(session_id: str, req: TickRequest):
    if req.ticks > STATE_CHANGE_MAX_TICKS_PER_REQUEST:
        return _message(400, f"ticks must be <= {STATE_CHANGE_MAX_TICKS_PER_REQUEST}")
    try:
        sess = session_store.get_session(session_id)
    except session_store.SessionNotFound:
        return _message(404, "Session not found")

    advance(
        sess.state,
        req.ticks,
        interval_ms=req.interval_ms,
        auto_stop_on_saturation=STATE_CHANGE_AUTO_STOP_ON_SATURATION,
    )
    return sess.to_dict()


@router.delete("/sessions/{session_id}", status_code=204, responses={404: {"model": MessageResponse}})
def delete_session(session_id: str):
    try:
        session_store.delete_session(session_id)
    except session_store.SessionNotFound:
        return _message(404, "Session not found")
    return Response(status_code=204)
