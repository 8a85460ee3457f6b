"""
HTTP access to the payments API.

Each operation kind (create_payment, confirm_payment, ...) maps to a method,
a path template with $key placeholders resolved from the run state, query
parameters (also templated, encoded by requests) and the key used to
authenticate. Scenario files may add or override operations.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import requests

from .errors import ScenarioDefinitionError, TransportError
from .utils import substitute

logger = logging.getLogger(__name__)

AUTH_SECRET = "api_key"
AUTH_PUBLISHABLE = "publishable_key"
AUTH_NONE = "none"


@dataclass(frozen=True)
class Operation:
    method: str
    path: str
    auth: str = AUTH_SECRET
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "Operation":
        if not isinstance(data, dict) or not data.get("path"):
            raise ScenarioDefinitionError(f"operation '{name}' needs at least a 'path'")
        auth = data.get("auth", AUTH_SECRET)
        if auth not in (AUTH_SECRET, AUTH_PUBLISHABLE, AUTH_NONE):
            raise ScenarioDefinitionError(f"operation '{name}': unknown auth '{auth}'")
        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise ScenarioDefinitionError(f"operation '{name}': 'params' must be a mapping")
        return cls(method=(data.get("method") or "GET").upper(), path=data["path"], auth=auth, params=dict(params))


DEFAULT_OPERATIONS: Dict[str, Operation] = {
    "create_payment": Operation("POST", "/payments"),
    "list_payment_methods": Operation("GET", "/account/payment_methods", AUTH_PUBLISHABLE,
                                     params={"client_secret": "$client_secret"}),
    "confirm_payment": Operation("POST", "/payments/$payment_id/confirm", AUTH_PUBLISHABLE),
    "retrieve_payment": Operation("GET", "/payments/$payment_id"),
    "sync_payment": Operation("GET", "/payments/$payment_id", params={"force_sync": "true"}),
    "capture_payment": Operation("POST", "/payments/$payment_id/capture"),
    "void_payment": Operation("POST", "/payments/$payment_id/cancel"),
    "create_payout": Operation("POST", "/payouts/create"),
    "retrieve_payout": Operation("GET", "/payouts/$payout_id"),
}


class HttpClient:
    def __init__(self, base_url: str, api_key: Optional[str] = None, publishable_key: Optional[str] = None,
                 timeout: float = 30, verify: Any = True, session: Optional[requests.Session] = None,
                 operations: Optional[Dict[str, Operation]] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.publishable_key = publishable_key
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()
        self.operations = dict(DEFAULT_OPERATIONS)
        if operations:
            self.operations.update(operations)

    def operation(self, kind: str) -> Operation:
        try:
            return self.operations[kind]
        except KeyError:
            raise ScenarioDefinitionError(
                f"Unknown operation '{kind}'; known operations: {sorted(self.operations)}"
            ) from None

    def _headers(self, op: Operation) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if op.method != "GET":
            headers["Content-Type"] = "application/json"
        if op.auth == AUTH_SECRET and self.api_key:
            headers["api-key"] = self.api_key
        elif op.auth == AUTH_PUBLISHABLE and self.publishable_key:
            headers["api-key"] = self.publishable_key
        return headers

    def call(self, kind: str, body: Optional[Dict[str, Any]], state: Any) -> Tuple[requests.Response, Dict[str, Any]]:
        """Perform exactly one request; returns (response, request snapshot)."""
        op = self.operation(kind)
        url = self.base_url + substitute(op.path, state)
        headers = self._headers(op)

        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self.timeout, "verify": self.verify}
        if body is not None and op.method != "GET":
            kwargs["json"] = body
        params = substitute(op.params, state)
        if params:
            kwargs["params"] = params

        request_info = {"method": op.method, "url": url, "params": kwargs.get("params"), "body": kwargs.get("json")}
        logger.debug("%s %s", op.method, url)
        try:
            resp = self.session.request(op.method, url, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(kind, f"Request failed: {exc}") from exc
        return resp, request_info
