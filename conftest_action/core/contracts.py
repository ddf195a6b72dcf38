from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path


CONTRACTS_DIR = Path(__file__).resolve().parents[1] / "contracts"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict:
    """Load a bundled JSON Schema by file stem, e.g. "check_results"."""
    path = CONTRACTS_DIR / f"{name}.schema.json"
    return json.loads(path.read_text(encoding="utf-8"))
