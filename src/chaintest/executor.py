"""
Runs a single step: build the request, make the call, check the response and
write any identifiers the response carries back into the run state.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests

from .assertions import check_response
from .extractor import ExtractionResult, extract
from .http_client import HttpClient
from .models import AssertionResult, ExpectedResponse
from .state import IDENTIFIER_KEYS, StateStore
from .utils import deep_merge, substitute

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    response: requests.Response
    request: Dict[str, Any]
    assertions: List[AssertionResult] = field(default_factory=list)
    extraction: ExtractionResult = field(default_factory=ExtractionResult)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return all(a.ok for a in self.assertions)


class StepExecutor:
    def __init__(self, client: HttpClient):
        self.client = client

    def build_request(self, request_body: Optional[Dict[str, Any]], runtime_flags: Optional[Dict[str, Any]],
                      state: StateStore) -> Optional[Dict[str, Any]]:
        if request_body is None and not runtime_flags:
            return None
        body = deep_merge(request_body or {}, runtime_flags or {})
        return substitute(body, state)

    def execute(self, operation_kind: str, request_body: Optional[Dict[str, Any]], expected: ExpectedResponse,
                runtime_flags: Optional[Dict[str, Any]], state: StateStore,
                extract_fields: Iterable[str] = ()) -> StepOutcome:
        """
        Raises TransportError when the call cannot be made; every content
        mismatch ends up in StepOutcome.assertions instead.
        """
        body = self.build_request(request_body, runtime_flags, state)

        t0 = time.time()
        resp, request_info = self.client.call(operation_kind, body, state)
        duration_ms = int((time.time() - t0) * 1000)

        assertions = check_response(resp, expected)

        names = list(IDENTIFIER_KEYS)
        names.extend(n for n in extract_fields if n not in names)
        extraction = extract(resp, names, expected_values=expected.fields, structural=expected.structural)
        assertions.extend(extraction.checks)
        extraction.write_to(state)

        for a in assertions:
            if not a.ok:
                logger.warning("%s: %s", operation_kind, a.message)

        return StepOutcome(
            response=resp,
            request=request_info,
            assertions=assertions,
            extraction=extraction,
            duration_ms=duration_ms,
        )
