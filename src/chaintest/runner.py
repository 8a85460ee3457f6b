"""
runner.py
- Loads scenarios from YAML (file, directory or glob)
- Resolves each step's fixtures from the connector profile registry at run time
- Executes steps strictly in order through the StepExecutor
- An unknown connector profile (or a step definition that turns out to be
  malformed at run time) aborts only the scenario it occurs in
- After every step asks the continuation gate whether to go on; once it says
  no, every remaining step is recorded as skipped and makes no call
"""

import glob
import logging
import os
import pathlib
from typing import Any, Dict, List, Optional, Tuple

from .errors import ChainTestError, ScenarioDefinitionError, TransportError
from .executor import StepExecutor
from .fixtures import FixtureLoader, load_yaml_file
from .gate import DEFAULT_POLICY, GatePolicy, should_continue
from .http_client import Operation
from .models import (
    STEP_ERROR,
    STEP_FAILED,
    STEP_PASSED,
    STEP_SKIPPED,
    ExpectedResponse,
    Scenario,
    ScenarioReport,
    Step,
    StepRecord,
)
from .registry import ConnectorProfileRegistry
from .state import CONNECTOR_KEY, StateStore
from .utils import body_snippet, deep_merge, extract_json, substitute

logger = logging.getLogger(__name__)

READY = "ready"
RUNNING = "running"
COMPLETED = "completed"
ABORTED = "aborted"


def load_scenarios(path: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Load scenarios YAML and apply simple $key substitutions using config."""
    data = load_yaml_file(path)
    if not data or "scenarios" not in data:
        raise ScenarioDefinitionError(f"Invalid scenarios file {path}: missing 'scenarios' key")
    if config:
        data = substitute(data, config)
    return data


def _gather_yaml_files_from_dir(dir_path: str) -> List[str]:
    """Return sorted list of .yml/.yaml files under dir_path (recursive)."""
    p = pathlib.Path(dir_path)
    if not p.is_dir():
        return []
    files = [str(x) for x in p.rglob("*") if x.is_file() and x.suffix.lower() in (".yml", ".yaml")]
    return sorted(set(files))


def load_scenarios_aggregate(path: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Load scenarios from a single YAML file, all YAML files under a directory,
    or a glob. Combines all 'scenarios' lists and 'operations' maps and
    annotates each scenario with '_source_file'.
    """
    if os.path.isfile(path):
        files = [path]
    elif os.path.isdir(path):
        files = _gather_yaml_files_from_dir(path)
        if not files:
            raise ScenarioDefinitionError(f"No scenario YAML files found in directory: {path}")
    else:
        hits = sorted(glob.glob(path, recursive=True))
        files = [h for h in hits if os.path.isfile(h) and h.lower().endswith((".yml", ".yaml"))]
        if not files:
            raise ScenarioDefinitionError(f"Provided scenarios path is not a file, directory, or matching glob: {path}")

    combined: List[Dict[str, Any]] = []
    operations: Dict[str, Any] = {}
    for f in files:
        data = load_scenarios(f, config=config)
        for s in data.get("scenarios") or []:
            if isinstance(s, dict):
                s["_source_file"] = f
            combined.append(s)
        operations.update(data.get("operations") or {})
    return {"scenarios": combined, "operations": operations}


def parse_scenarios(data: Dict[str, Any]) -> Tuple[List[Scenario], Dict[str, Operation]]:
    scenarios = [Scenario.from_dict(s) for s in data.get("scenarios") or []]
    operations = {name: Operation.from_dict(name, spec) for name, spec in (data.get("operations") or {}).items()}
    return scenarios, operations


class ScenarioRunner:
    """
    Runs scenarios against one StateStore. The store is shared by every
    scenario run through this runner, so identifiers produced by one scenario
    are visible to the next; use separate runners for isolated runs.
    """

    def __init__(self, executor: StepExecutor, registry: ConnectorProfileRegistry, state: StateStore,
                 fixtures: Optional[FixtureLoader] = None, gate_policy: GatePolicy = DEFAULT_POLICY):
        self.executor = executor
        self.registry = registry
        self.state = state
        self.fixtures = fixtures or FixtureLoader()
        self.gate_policy = gate_policy
        self.status = READY
        self.step_index: Optional[int] = None

    def _resolve(self, scenario: Scenario, step: Step) -> Tuple[Optional[Dict[str, Any]], ExpectedResponse]:
        """
        Late-bound: the connector is read from state when the step runs.
        Request layers, lowest first: fixture file, profile Request, step body.
        """
        body = None
        if step.fixture:
            try:
                body = self.fixtures.load(step.fixture)
            except FileNotFoundError as exc:
                raise ScenarioDefinitionError(f"step '{step.name}': {exc}") from exc

        expect = step.expect
        if step.profile:
            category = step.category or scenario.category
            req_data, res_data = self.registry.resolve(self.state.get(CONNECTOR_KEY), category, step.profile)
            if req_data:
                body = deep_merge(body or {}, req_data)
            expect = deep_merge(res_data, step.expect) if step.expect else res_data

        if step.body is not None:
            body = deep_merge(body or {}, step.body)
        # expectations may reference identifiers stored by earlier steps
        return body, ExpectedResponse.from_fixture(substitute(expect, self.state))

    def _run_step(self, scenario: Scenario, step: Step, record: StepRecord) -> bool:
        """Execute one step, fill its record and return the gate decision."""
        body, expected = self._resolve(scenario, step)
        try:
            outcome = self.executor.execute(step.operation, body, expected, step.flags, self.state,
                                            extract_fields=step.extract)
        except TransportError as exc:
            logger.error("[%s] %s: %s", scenario.name, step.name, exc)
            record.status = STEP_ERROR
            record.error = str(exc)
            record.gate = False
            return False

        resp = outcome.response
        record.request = outcome.request
        record.response = {
            "status_code": resp.status_code,
            "headers": dict(resp.headers),
            "json": extract_json(resp),
            "text_snippet": body_snippet(resp),
        }
        record.duration_ms = outcome.duration_ms
        record.assertions = outcome.assertions
        record.extracted = dict(outcome.extraction.values)
        record.missing = list(outcome.extraction.missing)
        record.status = STEP_PASSED if outcome.ok else STEP_FAILED
        record.gate = should_continue(expected, self.gate_policy)
        return record.gate

    def run(self, scenario: Scenario) -> ScenarioReport:
        """
        Run every step of `scenario` in order.

        ProfileLookupError (or any other ChainTestError raised while resolving
        or sending a step) aborts the scenario: the failing step is recorded
        as an error, the rest as skipped, and the exception is re-raised with
        the partial report attached as `exc.report`.
        """
        report = ScenarioReport(name=scenario.name, connector=self.state.get(CONNECTOR_KEY), source=scenario.source)
        self.status = RUNNING
        report.state = RUNNING
        proceed = True
        total = len(scenario.steps)
        logger.info("=== Running scenario: %s (%d step(s)) ===", scenario.name, total)

        try:
            for idx, step in enumerate(scenario.steps, start=1):
                self.step_index = idx
                record = StepRecord(index=idx, name=step.name, operation=step.operation)
                report.steps.append(record)
                if not proceed:
                    record.status = STEP_SKIPPED
                    logger.info("  [%d/%d] -> %s ... SKIPPED", idx, total, step.name)
                    continue
                try:
                    proceed = self._run_step(scenario, step, record)
                except ChainTestError as exc:
                    logger.error("[%s] %s: %s", scenario.name, step.name, exc)
                    record.status = STEP_ERROR
                    record.error = str(exc)
                    record.gate = False
                    for rest_idx, rest in enumerate(scenario.steps[idx:], start=idx + 1):
                        report.steps.append(StepRecord(index=rest_idx, name=rest.name, operation=rest.operation))
                    report.error = str(exc)
                    exc.report = report
                    raise
                logger.info("  [%d/%d] -> %s ... %s", idx, total, step.name, record.status.upper())
                if not proceed:
                    logger.info("  gate closed after '%s'; skipping remaining steps", step.name)
            report.state = COMPLETED
        finally:
            if report.state != COMPLETED:
                report.state = ABORTED
            self.status = report.state
            self.step_index = None
        return report

    def run_all(self, scenarios: List[Scenario]) -> List[ScenarioReport]:
        """An aborted scenario is reported and the run moves on to the next one."""
        reports = []
        for scenario in scenarios:
            try:
                reports.append(self.run(scenario))
            except ChainTestError as exc:
                reports.append(exc.report)
        return reports
