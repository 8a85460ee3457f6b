"""
Chained API scenario runner for payment connector tests.
Exposes the pieces most callers need so tests can import from `chaintest`.
"""
from .errors import ChainTestError, ProfileLookupError, ScenarioDefinitionError, TransportError
from .executor import StepExecutor, StepOutcome
from .extractor import ExtractionResult, extract
from .gate import GatePolicy, should_continue
from .http_client import HttpClient, Operation
from .models import AssertionResult, ExpectedResponse, Scenario, ScenarioReport, Step, StepRecord
from .registry import ConnectorProfileRegistry
from .runner import ScenarioRunner, load_scenarios, load_scenarios_aggregate, parse_scenarios
from .state import StateStore, load_state_file, save_state_file

__all__ = [
    "AssertionResult",
    "ChainTestError",
    "ConnectorProfileRegistry",
    "ExpectedResponse",
    "ExtractionResult",
    "GatePolicy",
    "HttpClient",
    "Operation",
    "ProfileLookupError",
    "Scenario",
    "ScenarioDefinitionError",
    "ScenarioReport",
    "ScenarioRunner",
    "StateStore",
    "Step",
    "StepExecutor",
    "StepOutcome",
    "StepRecord",
    "TransportError",
    "extract",
    "load_scenarios",
    "load_scenarios_aggregate",
    "load_state_file",
    "parse_scenarios",
    "save_state_file",
    "should_continue",
]
