"""
Continuation gate: decides, from the *expected* response of a step, whether
the rest of the scenario should run. Whether the step's assertions passed
plays no part in the decision.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .models import ExpectedResponse

DEFAULT_ERROR_KEYS = ("error", "error_code", "error_message")


@dataclass(frozen=True)
class GatePolicy:
    """
    How the halt decision is inferred when a descriptor carries no explicit
    trigger_skip flag: an expected body that contains any of error_keys marks
    the step as ending the happy path.
    """
    infer_from_body: bool = True
    error_keys: Tuple[str, ...] = DEFAULT_ERROR_KEYS

    @classmethod
    def from_config(cls, cfg: Optional[Dict[str, Any]]) -> "GatePolicy":
        if not cfg:
            return cls()
        if not isinstance(cfg, dict):
            raise ValueError("'gate' config must be a mapping")
        keys = cfg.get("error_keys", DEFAULT_ERROR_KEYS)
        if isinstance(keys, str):
            keys = [keys]
        return cls(
            infer_from_body=bool(cfg.get("infer_from_body", True)),
            error_keys=tuple(keys),
        )


DEFAULT_POLICY = GatePolicy()


def should_continue(expected: Optional[ExpectedResponse], policy: GatePolicy = DEFAULT_POLICY) -> bool:
    # no descriptor at all (e.g. the step never got one): halt
    if expected is None:
        return False
    if expected.trigger_skip is not None:
        return not expected.trigger_skip
    if policy.infer_from_body:
        return not any(key in expected.body for key in policy.error_keys)
    return True
