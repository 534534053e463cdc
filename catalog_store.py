# catalog_store.py
"""In-memory catalog of simulations and categories.

The catalog is static reference data: it is seeded from chemsim/seed/catalog/*.json
on first use and lives for the life of the process. Ids are assigned in
insertion order starting at 1.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from schemas import Category, InsertCategory, InsertSimulation, Simulation
from seed_loader import load_seed_rows

logger = logging.getLogger("chemsim-engine-api")


class MemStorage:
    def __init__(self, seed: bool = True) -> None:
        self._lock = threading.Lock()
        self._simulations: Dict[int, Simulation] = {}
        self._categories: Dict[int, Category] = {}
        self._next_simulation_id = 1
        self._next_category_id = 1
        if seed:
            self._seed()

    def _seed(self) -> None:
        for row in load_seed_rows("categories"):
            self.create_category(InsertCategory.model_validate(row))
        for row in load_seed_rows("simulations"):
            self.create_simulation(InsertSimulation.model_validate(row))
        logger.info(
            "catalog_store: seeded %s categories, %s simulations",
            len(self._categories),
            len(self._simulations),
        )

    # -----------------------------
    # simulations
    # -----------------------------
    def get_all_simulations(self) -> List[Simulation]:
        return list(self._simulations.values())

    def get_simulation_by_slug(self, slug: str) -> Optional[Simulation]:
        return next((s for s in self._simulations.values() if s.slug == slug), None)

    def get_simulations_by_category(self, category: str) -> List[Simulation]:
        return [s for s in self._simulations.values() if s.category == category]

    def get_featured_simulations(self) -> List[Simulation]:
        return [s for s in self._simulations.values() if s.is_featured]

    def get_new_simulations(self) -> List[Simulation]:
        return [s for s in self._simulations.values() if s.is_new]

    def get_popular_simulations(self) -> List[Simulation]:
        return [s for s in self._simulations.values() if s.is_popular]

    def create_simulation(self, data: InsertSimulation) -> Simulation:
        with self._lock:
            if self.get_simulation_by_slug(data.slug) is not None:
                raise ValueError(f"simulation slug already exists: {data.slug}")
            sim = Simulation(id=self._next_simulation_id, **data.model_dump())
            self._simulations[sim.id] = sim
            self._next_simulation_id += 1
            return sim

    # -----------------------------
    # categories
    # -----------------------------
    def get_all_categories(self) -> List[Category]:
        return list(self._categories.values())

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self._categories.values() if c.slug == slug), None)

    def create_category(self, data: InsertCategory) -> Category:
        with self._lock:
            if self.get_category_by_slug(data.slug) is not None:
                raise ValueError(f"category slug already exists: {data.slug}")
            cat = Category(id=self._next_category_id, **data.model_dump())
            self._categories[cat.id] = cat
            self._next_category_id += 1
            return cat


_STORAGE: Optional[MemStorage] = None
_STORAGE_LOCK = threading.Lock()


def get_storage() -> MemStorage:
    """Process-wide catalog, created lazily."""
    global _STORAGE
    if _STORAGE is not None:
        return _STORAGE
    with _STORAGE_LOCK:
        if _STORAGE is None:
            _STORAGE = MemStorage()
    return _STORAGE
