import json
import os

SEED_DIR = os.path.join(os.path.dirname(__file__), "chemsim", "seed", "catalog")


def load_seed_rows(name, seed_dir=None):
    seed_dir = seed_dir or SEED_DIR
    path = os.path.join(seed_dir, f"{name}.json")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"seed file {path} must contain a JSON list")
    return data
