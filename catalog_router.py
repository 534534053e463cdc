from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from catalog_store import get_storage
from schemas import Category, MessageResponse, Simulation

logger = logging.getLogger("chemsim-engine-api")

router = APIRouter(prefix="/api", tags=["catalog"])

_NOT_FOUND = {404: {"model": MessageResponse}}


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


# NOTE: the fixed listing paths must be registered before /simulations/{slug},
# otherwise "featured" / "new" / "popular" are swallowed as slugs.

@router.get("/simulations", response_model=List[Simulation])
def list_simulations():
    try:
        return get_storage().get_all_simulations()
    except Exception:
        logger.exception("/api/simulations failed")
        return _message(500, "Failed to fetch simulations")


@router.get("/simulations/featured", response_model=List[Simulation])
def list_featured_simulations():
    try:
        return get_storage().get_featured_simulations()
    except Exception:
        logger.exception("/api/simulations/featured failed")
        return _message(500, "Failed to fetch featured simulations")


@router.get("/simulations/new", response_model=List[Simulation])
def list_new_simulations():
    try:
        return get_storage().get_new_simulations()
    except Exception:
        logger.exception("/api/simulations/new failed")
        return _message(500, "Failed to fetch new simulations")


@router.get("/simulations/popular", response_model=List[Simulation])
def list_popular_simulations():
    try:
        return get_storage().get_popular_simulations()
    except Exception:
        logger.exception("/api/simulations/popular failed")
        return _message(500, "Failed to fetch popular simulations")


@router.get("/simulations/{slug}", response_model=Simulation, responses=_NOT_FOUND)
def get_simulation(slug: str):
    try:
        sim = get_storage().get_simulation_by_slug(slug)
    except Exception:
        logger.exception("/api/simulations/%s failed", slug)
        return _message(500, "Failed to fetch simulation")
    if sim is None:
        return _message(404, "Simulation not found")
    return sim


@router.get("/categories", response_model=List[Category])
def list_categories():
    try:
        return get_storage().get_all_categories()
    except Exception:
        logger.exception("/api/categories failed")
        return _message(500, "Failed to fetch categories")


@router.get("/categories/{slug}", response_model=Category, responses=_NOT_FOUND)
def get_category(slug: str):
    try:
        cat = get_storage().get_category_by_slug(slug)
    except Exception:
        logger.exception("/api/categories/%s failed", slug)
        return _message(500, "Failed to fetch category")
    if cat is None:
        return _message(404, "Category not found")
    return cat


@router.get("/categories/{slug}/simulations", response_model=List[Simulation], responses=_NOT_FOUND)
def list_category_simulations(slug: str):
    try:
        storage = get_storage()
        cat = storage.get_category_by_slug(slug)
        if cat is None:
            return _message(404, "Category not found")
        return storage.get_simulations_by_category(slug)
    except Exception:
        logger.exception("/api/categories/%s/simulations failed", slug)
        return _message(500, "Failed to fetch simulations for category")
