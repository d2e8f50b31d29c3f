"""Lifecycle adapter state machine and report finalization."""

import logging
import xml.etree.ElementTree as ET

import pytest

from polarion_report.adapter import (
    AdapterState,
    LifecycleAdapter,
    SetupSummary,
    SpecSummary,
    SuiteSummary,
    derive_test_name,
)
from polarion_report.config import RunConfiguration
from polarion_report.errors import ConfigurationError, ReportWriteError, SerializationError


def spec(*texts: str) -> SpecSummary:
    return SpecSummary(component_texts=list(texts))


def read_report(path) -> ET.Element:
    return ET.parse(path).getroot()


@pytest.mark.parametrize(
    "texts, expected",
    [
        (["Describe", "Context", "should work"], "Context: should work"),
        (["A", "B", "c", "d"], "B: c d"),
        (["Top", "Only"], "Only: "),
        (["Single"], "Single"),
        ([], ""),
    ],
)
def test_derive_test_name(texts, expected):
    assert derive_test_name(texts) == expected


def test_full_run_writes_report(adapter, report_path):
    adapter.suite_will_begin(SuiteSummary(suite_description="Tests Suite"))
    assert adapter.state is AdapterState.SUITE_STARTED

    adapter.before_suite_did_run(SetupSummary(state="passed"))
    for i in range(3):
        adapter.spec_will_run(spec("Top", "VM", f"starts {i}"))
        adapter.spec_did_complete(spec("Top", "VM", f"starts {i}"))
        assert adapter.state is AdapterState.COLLECTING_RESULTS
    adapter.after_suite_did_run(SetupSummary(state="passed"))
    adapter.suite_did_end(SuiteSummary(suite_description="Tests Suite"))

    assert adapter.state is AdapterState.FINALIZED
    assert adapter.errors == []
    assert adapter.report_path == report_path

    root = read_report(report_path)
    assert len(root.findall("properties/property")) == 5
    assert [tc.get("name") for tc in root.findall("testcase")] == [
        "VM: starts 0",
        "VM: starts 1",
        "VM: starts 2",
    ]
    props = {p.get("name"): p.get("value") for p in root.findall("properties/property")}
    assert props == {
        "project-id": "CNV",
        "testcase-lookup-method": "name",
        "custom-plannedin": "R1",
        "testrun-id": "R1_tier1",
        "custom-isautomated": "True",
    }


def test_empty_run_writes_properties_only(adapter, report_path):
    adapter.suite_will_begin(SuiteSummary())
    adapter.suite_did_end(SuiteSummary())

    root = read_report(report_path)
    assert len(root.findall("properties/property")) == 5
    assert root.findall("testcase") == []


def test_setup_hooks_have_no_effect(adapter):
    adapter.suite_will_begin(SuiteSummary())
    adapter.before_suite_did_run(SetupSummary(state="failed"))
    adapter.spec_will_run(spec("Top", "VM", "starts"))
    adapter.after_suite_did_run(SetupSummary(state="failed"))

    assert adapter.state is AdapterState.SUITE_STARTED
    assert adapter.model.test_cases == []


def test_duplicate_names_are_kept(adapter, report_path):
    adapter.suite_will_begin(SuiteSummary())
    adapter.spec_did_complete(spec("Top", "VM", "starts"))
    adapter.spec_did_complete(spec("Top", "VM", "starts"))
    adapter.suite_did_end(SuiteSummary())

    names = [tc.get("name") for tc in read_report(report_path).findall("testcase")]
    assert names == ["VM: starts", "VM: starts"]


def test_second_suite_begin_discards_records(adapter, report_path):
    adapter.suite_will_begin(SuiteSummary())
    adapter.spec_did_complete(spec("Top", "A", "x"))
    adapter.suite_will_begin(SuiteSummary())
    adapter.spec_did_complete(spec("Top", "A", "y"))
    adapter.suite_did_end(SuiteSummary())

    names = [tc.get("name") for tc in read_report(report_path).findall("testcase")]
    assert names == ["A: y"]


def test_empty_tier_in_testrun_id(report_path):
    adapter = LifecycleAdapter(
        RunConfiguration(project_id="CNV", planned_in="R1", report_file=str(report_path))
    )
    adapter.suite_will_begin(SuiteSummary())
    adapter.suite_did_end(SuiteSummary())

    props = {p.get("name"): p.get("value") for p in read_report(report_path).iter("property")}
    assert props["testrun-id"] == "R1_"


@pytest.mark.parametrize(
    "missing, message",
    [
        ("project_id", "Can not create Polarion report without project ID"),
        ("planned_in", "Can not create Polarion report without planned-in ID"),
    ],
)
def test_missing_required_config_skips_report(run_config, report_path, capsys, missing, message):
    adapter = LifecycleAdapter(run_config.model_copy(update={missing: ""}))

    adapter.suite_will_begin(SuiteSummary())
    adapter.spec_did_complete(spec("Top", "VM", "starts"))
    adapter.suite_did_end(SuiteSummary())

    assert not report_path.exists()
    assert adapter.state is AdapterState.FINALIZED
    assert adapter.report_path is None
    assert len(adapter.errors) == 1
    assert isinstance(adapter.errors[0], ConfigurationError)
    assert message in capsys.readouterr().err


def test_missing_config_leaves_existing_file_untouched(run_config, report_path):
    report_path.write_text("previous report")
    adapter = LifecycleAdapter(run_config.model_copy(update={"project_id": ""}))

    adapter.suite_will_begin(SuiteSummary())
    adapter.suite_did_end(SuiteSummary())

    assert report_path.read_text() == "previous report"


def test_write_failure_is_reported(run_config, tmp_path, capsys):
    adapter = LifecycleAdapter(run_config.model_copy(update={"report_file": str(tmp_path)}))

    adapter.suite_will_begin(SuiteSummary())
    adapter.suite_did_end(SuiteSummary())

    assert adapter.state is AdapterState.FINALIZED
    assert isinstance(adapter.errors[0], ReportWriteError)
    assert "Failed to create Polarion report file" in capsys.readouterr().err


def test_success_message(adapter, report_path, capsys):
    adapter.suite_will_begin(SuiteSummary())
    adapter.suite_did_end(SuiteSummary())
    assert f"Polarion report: {report_path}" in capsys.readouterr().out


def test_notifications_while_idle_initialize_model(adapter, report_path):
    adapter.spec_did_complete(spec("Top", "VM", "starts"))
    adapter.suite_did_end(SuiteSummary())

    root = read_report(report_path)
    assert len(root.findall("properties/property")) == 5
    assert [tc.get("name") for tc in root.findall("testcase")] == ["VM: starts"]


def test_short_component_path_is_recorded_with_warning(adapter, caplog):
    adapter.suite_will_begin(SuiteSummary())
    with caplog.at_level(logging.WARNING, logger="polarion_report.adapter"):
        adapter.spec_did_complete(spec("lonely"))

    assert adapter.model.names == ["lonely"]
    assert "fewer than two components" in caplog.text


def test_serialization_failure_is_reported(adapter, report_path, capsys, monkeypatch):
    report_path.write_text("previous report")

    def failing_write(model, path):
        raise SerializationError("Failed to generate Polarion report: bad name")

    monkeypatch.setattr("polarion_report.adapter.write_report", failing_write)

    adapter.suite_will_begin(SuiteSummary())
    adapter.spec_did_complete(spec("Top", "VM", "starts"))
    adapter.suite_did_end(SuiteSummary())

    assert adapter.state is AdapterState.FINALIZED
    assert adapter.report_path is None
    assert len(adapter.errors) == 1
    assert isinstance(adapter.errors[0], SerializationError)
    assert "Failed to generate Polarion report" in capsys.readouterr().err
    assert report_path.read_text() == "previous report"
