"""Pytest configuration and fixtures."""

import pytest

from polarion_report.adapter import LifecycleAdapter
from polarion_report.config import RunConfiguration


@pytest.fixture
def report_path(tmp_path):
    """Destination for the report written by a test."""
    return tmp_path / "polarion_results.xml"


@pytest.fixture
def run_config(report_path) -> RunConfiguration:
    """A configuration that can produce a report."""
    return RunConfiguration(
        project_id="CNV",
        planned_in="R1",
        tier="tier1",
        report_file=str(report_path),
        enabled=True,
    )


@pytest.fixture
def adapter(run_config) -> LifecycleAdapter:
    return LifecycleAdapter(run_config)
