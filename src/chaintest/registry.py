"""
Connector profile registry.

A profile maps payment-method category -> scenario name -> {Request, Response}
fixture pair. Profiles are loaded once and never modified during a run.
Unknown lookups raise ProfileLookupError: a missing fixture means missing
test data, not something to paper over with a default.
"""

import logging
import os
from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

from .errors import ProfileLookupError
from .fixtures import load_document

logger = logging.getLogger(__name__)

_PROFILE_EXTENSIONS = (".yaml", ".yml", ".json")


class ConnectorProfileRegistry:
    def __init__(self, profiles: Dict[str, Dict[str, Any]]):
        self._profiles = deepcopy(profiles)

    @classmethod
    def from_mapping(cls, profiles: Dict[str, Dict[str, Any]]) -> "ConnectorProfileRegistry":
        if not isinstance(profiles, dict):
            raise ValueError("connector profiles must be a mapping of connector_id -> profile")
        return cls(profiles)

    @classmethod
    def from_directory(cls, path: str) -> "ConnectorProfileRegistry":
        """One file per connector: <connector_id>.yaml|.yml|.json."""
        if not os.path.isdir(path):
            raise ValueError(f"Connector profile directory not found: {path}")
        profiles: Dict[str, Dict[str, Any]] = {}
        for entry in sorted(os.listdir(path)):
            stem, ext = os.path.splitext(entry)
            if ext.lower() not in _PROFILE_EXTENSIONS:
                continue
            if stem in profiles:
                raise ValueError(f"Duplicate profile for connector '{stem}' in {path}")
            data = load_document(os.path.join(path, entry))
            if not isinstance(data, dict):
                raise ValueError(f"Profile file {entry} must contain a mapping")
            profiles[stem] = data
        logger.debug("loaded %d connector profile(s) from %s", len(profiles), path)
        return cls(profiles)

    def connectors(self) -> List[str]:
        return sorted(self._profiles)

    def resolve(self, connector_id: Optional[str], category: str, scenario_name: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Return (Request, Response) exactly as authored for the triple."""
        if not connector_id:
            raise ProfileLookupError("No connector selected (state key 'connector_id' is not set)")
        profile = self._profiles.get(connector_id)
        if profile is None:
            raise ProfileLookupError(
                f"Unknown connector '{connector_id}'; known connectors: {self.connectors()}"
            )
        scenarios = profile.get(category)
        if not isinstance(scenarios, dict):
            raise ProfileLookupError(f"Connector '{connector_id}' has no category '{category}'")
        pair = scenarios.get(scenario_name)
        if not isinstance(pair, dict):
            raise ProfileLookupError(
                f"Connector '{connector_id}' has no scenario '{scenario_name}' in category '{category}'"
            )
        missing = [k for k in ("Request", "Response") if k not in pair]
        if missing:
            raise ProfileLookupError(
                f"Fixture {connector_id}/{category}/{scenario_name} is missing {missing}"
            )
        return deepcopy(pair["Request"] or {}), deepcopy(pair["Response"] or {})
