"""
Command line entry point.

Exit codes: 0 when every scenario passed, 2 when any failed, 3 on a fatal
error (malformed files, bad config) or when a scenario was aborted by an
unknown connector/scenario fixture. Aborted scenarios still end up in the
summary, the state file and the reports.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import RunConfig, load_config
from .errors import ChainTestError
from .executor import StepExecutor
from .fixtures import FixtureLoader
from .http_client import HttpClient
from .registry import ConnectorProfileRegistry
from .reporting import build_report, generate_html_report, summarize, write_json_report
from .runner import ABORTED, ScenarioRunner, load_scenarios_aggregate, parse_scenarios
from .state import CONNECTOR_KEY, load_state_file, save_state_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chained API scenario tester for payment connectors.")
    parser.add_argument("--scenarios", "-s", help="Path to scenarios YAML, directory or glob", default="scenarios.yaml")
    parser.add_argument("--connectors", help="Directory of connector profile files", default="connectors")
    parser.add_argument("--fixtures", help="Directory of request body fixtures", default="fixtures")
    parser.add_argument("--config", "-c", help="Path to key->value config YAML for $key substitution", default=None)
    parser.add_argument("--state", help="JSON file holding run state, read at start and written at end", default=None)
    parser.add_argument("--connector", help="Connector under test (overrides config and state)", default=None)
    parser.add_argument("--base-url", help="API base URL", default=None)
    parser.add_argument("--report-json", help="Write detailed JSON report to this file (optional)", default=None)
    parser.add_argument("--report-html", help="Write detailed HTML report to this file (optional)", default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging and per-step details")
    return parser


def _print_summary(reports) -> None:
    summary = summarize(reports)
    print("\n=== Summary ===")
    print(f"Scenarios executed: {summary['scenarios_total']}")
    print(f"Passed: {summary['passed']}")
    print(f"Failed: {summary['failed']}")
    if summary["aborted"]:
        print(f"Aborted: {summary['aborted']}")
    steps = summary["steps"]
    print(f"Steps: passed {steps['passed']}, failed {steps['failed']}, "
          f"error {steps['error']}, skipped {steps['skipped']}")

    failing = [r for r in reports if not r.ok]
    if failing:
        print("\nFailures detail:")
        for r in failing:
            print(f"- Scenario: {r.name}")
            for step in r.steps:
                if step.error:
                    print(f"  Step #{step.index}: {step.name}")
                    print(f"  Reason: {step.error}")
                for a in step.failed_assertions:
                    print(f"  Step #{step.index}: {step.name}")
                    print(f"  Reason: {a.message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = RunConfig.from_sources(
            load_config(args.config),
            overrides={"base_url": args.base_url, "connector_id": args.connector},
        )
        state = load_state_file(args.state)
        if cfg.connector_id:
            state.set(CONNECTOR_KEY, cfg.connector_id)

        data = load_scenarios_aggregate(args.scenarios, config=cfg.values)
        scenarios, operations = parse_scenarios(data)
        registry = ConnectorProfileRegistry.from_directory(args.connectors)

        client = HttpClient(
            cfg.base_url,
            api_key=cfg.api_key,
            publishable_key=cfg.publishable_key,
            timeout=cfg.timeout,
            verify=cfg.verify_tls,
            operations=operations,
        )
        runner = ScenarioRunner(
            StepExecutor(client),
            registry,
            state,
            fixtures=FixtureLoader(args.fixtures),
            gate_policy=cfg.gate,
        )
        reports = runner.run_all(scenarios)
    except (ChainTestError, ValueError, FileNotFoundError) as exc:
        print(f"Fatal error: {exc}")
        return 3

    _print_summary(reports)

    if args.state:
        save_state_file(state, args.state)

    report = build_report(reports, state.snapshot())
    if args.report_json:
        write_json_report(report, args.report_json)
        print(f"Wrote JSON report to {args.report_json}")
    if args.report_html:
        generate_html_report(report, args.report_html)
        print(f"Wrote HTML report to {args.report_html}")

    if any(r.state == ABORTED for r in reports):
        return 3
    return 0 if all(r.ok for r in reports) else 2


def main_cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
