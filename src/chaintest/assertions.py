"""
Soft assertions against a response.

Every check is evaluated and recorded as an AssertionResult; a failing check
never prevents the following ones from running.

Supported checks:
  - status: expected HTTP status code
  - body: {field: value} compared against the top level of the JSON body
  - json_assertions: list of JSONPath assertion objects. Each object may include:
    - path: JSONPath (required)
    - expected_value: value to match
    - exists: true/false  -> assert presence/absence of the path
    - not_null: true     -> assert path exists and no matched value is null
    - contains: value    -> for arrays/objects, assert value is contained
"""

from typing import Any, Dict, List

import requests
from jsonpath_ng import parse as jsonpath_parse

from .models import AssertionResult, ExpectedResponse
from .utils import extract_json

_MISSING = object()


def _contains(found: Any, expected: Any) -> bool:
    if isinstance(found, (list, tuple)):
        return expected in found
    if isinstance(found, dict):
        # allow checking values or keys
        return expected in found.values() or expected in found.keys()
    return found == expected


def check_json_assertion(body: Any, assertion: Dict[str, Any]) -> AssertionResult:
    path = assertion.get("path")
    if not path:
        return AssertionResult("json_assertion", False, "Invalid assertion: missing 'path'")
    name = f"jsonpath {path}"
    if body is None:
        return AssertionResult(name, False, "Response body is not valid JSON")

    try:
        expr = jsonpath_parse(path)
    except Exception as e:
        return AssertionResult(name, False, f"Invalid JSONPath '{path}': {e}")

    matches = [m.value for m in expr.find(body)]

    if "exists" in assertion:
        want = bool(assertion.get("exists"))
        if want and not matches:
            return AssertionResult(name, False, f"JSON path '{path}' not found (expected to exist)")
        if not want and matches:
            return AssertionResult(name, False, f"JSON path '{path}' expected to be absent but found {matches!r}",
                                   actual=matches)
        return AssertionResult(name, True)

    if assertion.get("not_null"):
        if not matches:
            return AssertionResult(name, False, f"JSON path '{path}' not found (not_null asserted)")
        if any(m is None for m in matches):
            return AssertionResult(name, False, f"JSON path '{path}' contains null value(s): {matches!r}",
                                   actual=matches)
        return AssertionResult(name, True)

    if "contains" in assertion:
        expected = assertion.get("contains")
        if not matches:
            return AssertionResult(name, False, f"JSON path '{path}' not found (contains asserted)", expected=expected)
        if any(_contains(m, expected) for m in matches):
            return AssertionResult(name, True, expected=expected)
        return AssertionResult(name, False, f"JSON path '{path}' does not contain {expected!r}; values: {matches!r}",
                               expected=expected, actual=matches)

    if "expected_value" in assertion:
        expected = assertion.get("expected_value")
        if not matches:
            return AssertionResult(name, False, f"JSON path '{path}' not found", expected=expected)
        if any(m == expected for m in matches):
            return AssertionResult(name, True, expected=expected, actual=matches[0] if len(matches) == 1 else matches)
        return AssertionResult(name, False, f"JSON path '{path}' expected {expected!r} but got {matches!r}",
                               expected=expected, actual=matches)

    # default: require presence
    if not matches:
        return AssertionResult(name, False, f"JSON path '{path}' not found")
    return AssertionResult(name, True)


def check_status(response: requests.Response, expected_status: int) -> AssertionResult:
    if response.status_code == expected_status:
        return AssertionResult("status", True, expected=expected_status, actual=response.status_code)
    return AssertionResult(
        "status", False,
        f"Status Code mismatch: expected {expected_status}, got {response.status_code}",
        expected=expected_status, actual=response.status_code,
    )


def check_body_fields(body: Any, expected_body: Dict[str, Any]) -> List[AssertionResult]:
    results = []
    for key, expected in expected_body.items():
        name = f"body.{key}"
        if not isinstance(body, dict):
            results.append(AssertionResult(name, False, "Response body is not a JSON object", expected=expected))
            continue
        actual = body.get(key, _MISSING)
        if actual is _MISSING:
            results.append(AssertionResult(name, False, f"Field '{key}' missing from response", expected=expected))
        elif actual != expected:
            results.append(AssertionResult(name, False, f"Field '{key}' expected {expected!r} but got {actual!r}",
                                           expected=expected, actual=actual))
        else:
            results.append(AssertionResult(name, True, expected=expected, actual=actual))
    return results


def check_response(response: requests.Response, expected: ExpectedResponse) -> List[AssertionResult]:
    """Evaluate every check of `expected` against `response`."""
    results: List[AssertionResult] = []
    if expected.status is not None:
        results.append(check_status(response, expected.status))

    if expected.body or expected.json_assertions:
        body = extract_json(response)
        results.extend(check_body_fields(body, expected.body))
        for assertion in expected.json_assertions:
            results.append(check_json_assertion(body, assertion))
    return results
