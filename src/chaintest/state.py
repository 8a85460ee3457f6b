"""
Per-run key/value state.

Holds the connector under test and the identifiers produced by earlier steps
(payment_id, client_secret, ...). Persisted to a JSON document at run start
and run end only.
"""

import json
import logging
import os
from copy import deepcopy
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

CONNECTOR_KEY = "connector_id"

# response fields written back to the store whenever a step returns them
IDENTIFIER_KEYS = ("payment_id", "mandate_id", "client_secret", "payout_id")


class StateStore:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    @classmethod
    def load(cls, snapshot: Optional[Dict[str, Any]]) -> "StateStore":
        """Build a store from a previously taken snapshot (copied)."""
        if snapshot is None:
            return cls()
        if not isinstance(snapshot, dict):
            raise ValueError("state snapshot must be a mapping of key -> value")
        return cls(deepcopy(snapshot))

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def snapshot(self) -> Dict[str, Any]:
        return deepcopy(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"StateStore({self._data!r})"


def load_state_file(path: Optional[str]) -> StateStore:
    """Load persisted state; a missing file yields an empty store."""
    if not path or not os.path.isfile(path):
        return StateStore()
    with open(path, "rt", encoding="utf-8") as fh:
        text = fh.read()
    if not text.strip():
        return StateStore()
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ValueError(f"Failed to load state '{path}': {e}")
    logger.debug("loaded %d state key(s) from %s", len(data), path)
    return StateStore.load(data)


def save_state_file(store: StateStore, path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(store.snapshot(), fh, indent=2, ensure_ascii=False)
    logger.debug("saved %d state key(s) to %s", len(store), path)
