"""
Small utility helpers used by tests and the runner.
"""

import json
import re
from typing import Any, Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

# $key placeholder (no braces, single level keys)
PLACEHOLDER_RE = re.compile(r"\$([A-Za-z0-9_]+)")

_BOOL_TRUE = {"true", "1", "yes", "y", "on"}


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOL_TRUE


def substitute(obj: Any, values: Any) -> Any:
    """
    Recursively substitute $key placeholders in strings.
    `values` is anything with a dict-like get() and `in` (dict or StateStore).
    - If a string is exactly "$key", the typed value is returned.
    - Otherwise each occurrence is replaced with str(value).
    Unknown keys are left untouched.
    """
    if isinstance(obj, dict):
        return {k: substitute(v, values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [substitute(v, values) for v in obj]
    if isinstance(obj, str):
        matches = list(PLACEHOLDER_RE.finditer(obj))
        if not matches:
            return obj
        if len(matches) == 1 and matches[0].start() == 0 and matches[0].end() == len(obj):
            key = matches[0].group(1)
            if values is not None and key in values:
                return values.get(key)
            return obj

        def _repl(m):
            key = m.group(1)
            if values is not None and key in values:
                return str(values.get(key))
            return m.group(0)
        return PLACEHOLDER_RE.sub(_repl, obj)
    return obj


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base; nested mappings are merged, everything else replaced."""
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def extract_json(response: requests.Response) -> Any:
    """Safely parse response JSON; return None if invalid."""
    try:
        return response.json()
    except ValueError:
        return None


def body_snippet(response: requests.Response, limit: int = 2000) -> str:
    body = extract_json(response)
    if body is not None:
        return json.dumps(body, indent=2)[:limit]
    return (response.text or "")[:limit]


def make_response_json(obj: Any, status: int = 200, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """
    Convenience for building a requests.Response with JSON body for tests.
    """
    body = json.dumps(obj)
    hdrs = dict(headers or {})
    hdrs.setdefault("Content-Type", "application/json")
    return make_response_text(body, status=status, headers=hdrs)


def make_response_text(text: str, status: int = 200, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.headers = CaseInsensitiveDict(headers or {"Content-Type": "text/plain"})
    resp.encoding = "utf-8"
    return resp
