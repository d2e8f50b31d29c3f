"""Lifecycle adapter that turns test-run notifications into a Polarion report."""

import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

import click
from pydantic import BaseModel, Field

from .config import RunConfiguration
from .errors import PolarionReportError
from .models import ReportModel
from .reporter import write_report

logger = logging.getLogger(__name__)


class SuiteSummary(BaseModel):
    """Description of the suite being run."""
    suite_description: str = ""


class SpecSummary(BaseModel):
    """A completed test, described by its nesting path from outermost in."""
    component_texts: list[str] = Field(default_factory=list)


class SetupSummary(BaseModel):
    """Outcome of a suite-level setup or teardown phase."""
    state: str = ""


class LifecycleListener(Protocol):
    """Notifications a host test framework delivers during a run."""

    def suite_will_begin(self, summary: SuiteSummary) -> None: ...

    def before_suite_did_run(self, summary: SetupSummary) -> None: ...

    def spec_will_run(self, summary: SpecSummary) -> None: ...

    def spec_did_complete(self, summary: SpecSummary) -> None: ...

    def after_suite_did_run(self, summary: SetupSummary) -> None: ...

    def suite_did_end(self, summary: SuiteSummary) -> None: ...


class AdapterState(str, Enum):
    IDLE = "idle"
    SUITE_STARTED = "suite_started"
    COLLECTING_RESULTS = "collecting_results"
    FINALIZED = "finalized"


def derive_test_name(component_texts: list[str]) -> str:
    """Build the Polarion display name for a test.

    The outermost label is dropped, the next one becomes the prefix and
    the rest are joined with spaces: ``["A", "B", "c", "d"]`` gives
    ``"B: c d"``. A path with a single label is used as-is.
    """
    if len(component_texts) < 2:
        return " ".join(component_texts)
    return f"{component_texts[1]}: {' '.join(component_texts[2:])}"


class LifecycleAdapter:
    """Collects completed tests and writes the Polarion report at suite end."""

    def __init__(self, config: RunConfiguration):
        self.config = config
        self.state = AdapterState.IDLE
        self.report_path: Path | None = None
        self.errors: list[PolarionReportError] = []
        self._model = ReportModel()

    @property
    def model(self) -> ReportModel:
        return self._model

    def suite_will_begin(self, summary: SuiteSummary) -> None:
        """Start a fresh report, discarding anything recorded before."""
        if self.state is not AdapterState.IDLE:
            logger.debug("Suite restarted from state %s, discarding recorded tests", self.state.value)
        self._model.initialize(self.config.properties(), summary.suite_description)
        self.report_path = None
        self.errors = []
        self.state = AdapterState.SUITE_STARTED

    def before_suite_did_run(self, summary: SetupSummary) -> None:
        """Suite setup is not reported."""
        pass

    def spec_will_run(self, summary: SpecSummary) -> None:
        """Only completed tests are reported."""
        pass

    def after_suite_did_run(self, summary: SetupSummary) -> None:
        """Suite teardown is not reported."""
        pass

    def spec_did_complete(self, summary: SpecSummary) -> None:
        """Record a completed test under its derived name."""
        if self.state is AdapterState.IDLE:
            self.suite_will_begin(SuiteSummary())

        texts = summary.component_texts
        if len(texts) < 2:
            logger.warning("Test path %r has fewer than two components", texts)
        self._model.record_test_case(derive_test_name(texts))
        self.state = AdapterState.COLLECTING_RESULTS

    def suite_did_end(self, summary: SuiteSummary) -> None:
        """Validate configuration and write the report; failures are only reported."""
        if self.state is AdapterState.IDLE:
            self.suite_will_begin(summary)

        try:
            self.config.validate_required()
            self.report_path = write_report(self._model, self.config.report_file)
        except PolarionReportError as exc:
            self.errors.append(exc)
            click.echo(click.style(str(exc), fg="red"), err=True)
        else:
            logger.info(
                "Wrote %d test cases for %r to %s",
                len(self._model.test_cases),
                self._model.suite_name,
                self.report_path,
            )
            click.echo(f"Polarion report: {self.report_path}")
        finally:
            self.state = AdapterState.FINALIZED
