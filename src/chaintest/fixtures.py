"""
Read-only loading of static JSON / YAML documents: request body fixtures
and connector profile files.
"""

import json
import os
from copy import deepcopy
from typing import Any, Dict, Optional

import yaml


def load_yaml_file(path: str) -> Dict[str, Any]:
    """Load YAML file and return parsed dict (raises on error)."""
    with open(path, "rt", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data or {}


def load_document(path: str) -> Any:
    """Load a .json file with json, anything else with the YAML loader."""
    if path.lower().endswith(".json"):
        with open(path, "rt", encoding="utf-8") as fh:
            return json.load(fh)
    return load_yaml_file(path)


class FixtureLoader:
    """Loads request fixtures by name relative to a base directory, once each."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or "."
        self._cache: Dict[str, Any] = {}

    def path_for(self, name: str) -> str:
        if os.path.isabs(name):
            return name
        return os.path.join(self.base_dir, name)

    def load(self, name: str) -> Any:
        """Return a copy of the fixture so callers may mutate it freely."""
        if name not in self._cache:
            path = self.path_for(name)
            if not os.path.isfile(path):
                raise FileNotFoundError(f"Fixture not found: {path}")
            self._cache[name] = load_document(path)
        return deepcopy(self._cache[name])
