"""
Collection-runner style response handling: structural checks plus pulling
named fields out of the body for use by later requests.

Extraction never raises. A body that is not JSON (or not a JSON object)
simply leaves every requested field missing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests

from .models import AssertionResult
from .state import StateStore
from .utils import extract_json

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    values: Dict[str, Any] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    checks: List[AssertionResult] = field(default_factory=list)

    def get(self, name: str) -> Any:
        return self.values.get(name)

    def write_to(self, state: StateStore) -> None:
        for name, value in self.values.items():
            state.set(name, value)
            logger.info("- use $%s as state variable for value %r", name, value)
        for name in self.missing:
            logger.info("Unable to assign variable $%s, as %s is undefined.", name, name)


def structural_checks(response: requests.Response, body: Any) -> List[AssertionResult]:
    status = response.status_code
    content_type = response.headers.get("Content-Type") or ""
    return [
        AssertionResult(
            "status is 2xx", 200 <= status < 300,
            None if 200 <= status < 300 else f"Status code {status} is not 2xx",
            actual=status,
        ),
        AssertionResult(
            "content-type is application/json", "application/json" in content_type,
            None if "application/json" in content_type else f"Content-Type is {content_type!r}",
            actual=content_type,
        ),
        AssertionResult(
            "response has JSON body", body is not None,
            None if body is not None else "Response body is not valid JSON",
        ),
    ]


def extract(response: requests.Response, field_names: Iterable[str],
            expected_values: Optional[Dict[str, Any]] = None, structural: bool = True) -> ExtractionResult:
    """
    Pull `field_names` from the top level of the JSON body.

    A field counts as present only when it holds a truthy value. Each entry of
    expected_values is checked for equality, but only when that field is
    present in the response.
    """
    body = extract_json(response)
    result = ExtractionResult()
    if structural:
        result.checks.extend(structural_checks(response, body))

    obj = body if isinstance(body, dict) else {}
    for name in field_names:
        value = obj.get(name)
        if value:
            result.values[name] = value
        elif name not in result.missing:
            result.missing.append(name)

    for name, expected in (expected_values or {}).items():
        value = obj.get(name)
        if not value:
            continue
        ok = value == expected
        result.checks.append(AssertionResult(
            f"value of '{name}' matches {expected!r}", ok,
            None if ok else f"'{name}' expected {expected!r} but got {value!r}",
            expected=expected, actual=value,
        ))
    return result
