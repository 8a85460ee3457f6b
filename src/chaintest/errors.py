"""
Exception types raised by the runner.

Assertion mismatches are not exceptions; they are collected as
AssertionResult records. Only lookup and transport problems abort a step.
"""


class ChainTestError(Exception):
    """Base class for runner errors."""

    # partial ScenarioReport of the scenario this error aborted, set by the runner
    report = None


class ProfileLookupError(ChainTestError, LookupError):
    """Connector, category or scenario fixture missing from the registry."""


class TransportError(ChainTestError):
    """The HTTP call itself failed (connection, timeout, invalid URL...)."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class ScenarioDefinitionError(ChainTestError, ValueError):
    """Malformed scenario or operation definition."""
