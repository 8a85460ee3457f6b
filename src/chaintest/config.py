"""
Run configuration.

The config file is a flat YAML key -> value mapping. Every key is available
for $key substitution in scenario files; a few keys also drive the run
itself. Environment variables override the file, command line flags
override both.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .gate import GatePolicy
from .utils import as_bool

ENV_OVERRIDES = {
    "base_url": "CHAINTEST_BASE_URL",
    "api_key": "CHAINTEST_API_KEY",
    "publishable_key": "CHAINTEST_PUBLISHABLE_KEY",
    "connector_id": "CHAINTEST_CONNECTOR",
    "timeout": "HTTP_TIMEOUT_SECONDS",
    "verify_tls": "HTTP_VERIFY_TLS",
}


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Load simple key->value YAML config used for $key substitution."""
    if not path:
        return {}
    try:
        with open(path, "rt", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config '{path}': {e}")
    if not isinstance(cfg, dict):
        raise ValueError("config file must be a mapping of key -> value")
    return cfg


@dataclass
class RunConfig:
    base_url: str = ""
    api_key: Optional[str] = None
    publishable_key: Optional[str] = None
    connector_id: Optional[str] = None
    timeout: float = 30.0
    verify_tls: bool = True
    gate: GatePolicy = field(default_factory=GatePolicy)
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_sources(cls, file_values: Optional[Dict[str, Any]] = None,
                     environ: Optional[Dict[str, str]] = None,
                     overrides: Optional[Dict[str, Any]] = None) -> "RunConfig":
        merged: Dict[str, Any] = dict(file_values or {})
        env = os.environ if environ is None else environ
        for key, var in ENV_OVERRIDES.items():
            if env.get(var):
                merged[key] = env[var]
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value

        try:
            timeout = float(merged.get("timeout", 30.0))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid timeout: {merged.get('timeout')!r}")

        return cls(
            base_url=str(merged.get("base_url") or ""),
            api_key=merged.get("api_key"),
            publishable_key=merged.get("publishable_key"),
            connector_id=merged.get("connector_id"),
            timeout=timeout,
            verify_tls=as_bool(merged.get("verify_tls", True)),
            gate=GatePolicy.from_config(merged.get("gate")),
            values=merged,
        )
