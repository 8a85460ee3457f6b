from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from .errors import ScenarioDefinitionError
from .utils import as_bool


STEP_PASSED = "passed"
STEP_FAILED = "failed"
STEP_ERROR = "error"
STEP_SKIPPED = "skipped"


@dataclass
class AssertionResult:
    name: str
    ok: bool
    message: Optional[str] = None
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExpectedResponse:
    """
    What a step expects back, plus the halt policy for the gate.

    body keys are compared one by one against the top level of the JSON
    response. fields are expected values for extracted fields and are only
    checked when the field is present.
    """
    status: Optional[int] = None
    body: Dict[str, Any] = field(default_factory=dict)
    json_assertions: List[Dict[str, Any]] = field(default_factory=list)
    trigger_skip: Optional[bool] = None
    structural: bool = False
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fixture(cls, data: Optional[Dict[str, Any]]) -> "ExpectedResponse":
        """Accepts a profile Response fixture or an inline `expect:` mapping."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ScenarioDefinitionError(f"expected response must be a mapping, got {type(data).__name__}")
        status = data.get("status", data.get("status_code"))
        body = data.get("body") or {}
        if not isinstance(body, dict):
            raise ScenarioDefinitionError("expected response 'body' must be a mapping")
        if status is not None:
            try:
                status = int(status)
            except (TypeError, ValueError):
                raise ScenarioDefinitionError(f"expected response status must be an integer, got {status!r}") from None
        trigger_skip = data.get("trigger_skip")
        return cls(
            status=status,
            body=dict(body),
            json_assertions=list(data.get("json_assertions") or []),
            trigger_skip=as_bool(trigger_skip) if trigger_skip is not None else None,
            structural=as_bool(data.get("structural", False)),
            fields=dict(data.get("fields") or {}),
        )


@dataclass
class Step:
    name: str
    operation: str
    fixture: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    profile: Optional[str] = None
    category: Optional[str] = None
    flags: Dict[str, Any] = field(default_factory=dict)
    expect: Optional[Dict[str, Any]] = None
    extract: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int) -> "Step":
        if not isinstance(data, dict):
            raise ScenarioDefinitionError(f"step #{index} must be a mapping")
        operation = data.get("operation")
        if not operation:
            raise ScenarioDefinitionError(f"step #{index} is missing 'operation'")
        return cls(
            name=data.get("name") or f"step-{index}",
            operation=operation,
            fixture=data.get("fixture"),
            body=data.get("body"),
            profile=data.get("profile"),
            category=data.get("category"),
            flags=dict(data.get("flags") or {}),
            expect=data.get("expect"),
            extract=list(data.get("extract") or []),
        )


@dataclass
class Scenario:
    name: str
    steps: List[Step]
    category: str = "card_pm"
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        if not isinstance(data, dict):
            raise ScenarioDefinitionError("scenario must be a mapping")
        raw_steps = data.get("steps") or []
        if not isinstance(raw_steps, list):
            raise ScenarioDefinitionError(f"scenario '{data.get('name')}': 'steps' must be a list")
        steps = [Step.from_dict(s, idx) for idx, s in enumerate(raw_steps, start=1)]
        return cls(
            name=data.get("name", "<unnamed>"),
            steps=steps,
            category=data.get("category") or "card_pm",
            source=data.get("_source_file"),
        )


@dataclass
class StepRecord:
    index: int
    name: str
    operation: str
    status: str = STEP_SKIPPED
    assertions: List[AssertionResult] = field(default_factory=list)
    gate: Optional[bool] = None
    extracted: Dict[str, Any] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    request: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None
    duration_ms: Optional[int] = None
    error: Optional[str] = None

    @property
    def failed_assertions(self) -> List[AssertionResult]:
        return [a for a in self.assertions if not a.ok]

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["assertions"] = [a.to_dict() for a in self.assertions]
        return out


@dataclass
class ScenarioReport:
    name: str
    connector: Optional[str]
    source: Optional[str] = None
    state: str = "ready"
    steps: List[StepRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return all(s.status in (STEP_PASSED, STEP_SKIPPED) for s in self.steps)

    def count(self, status: str) -> int:
        return sum(1 for s in self.steps if s.status == status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "connector": self.connector,
            "source": self.source,
            "state": self.state,
            "ok": self.ok,
            "error": self.error,
            "steps": [s.to_dict() for s in self.steps],
        }
