"""pytest plugin wiring for the Polarion reporter."""

import click
import pytest

from .adapter import LifecycleAdapter, LifecycleListener, SetupSummary, SpecSummary, SuiteSummary
from .config import RunConfiguration
from .errors import ConfigurationError

PLUGIN_NAME = "polarion-reporter"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the Polarion reporter options."""
    group = parser.getgroup("polarion", "Polarion results reporting")
    group.addoption(
        "--polarion-execution",
        action="store_true",
        default=None,
        dest="polarion_execution",
        help="Run Polarion reporter",
    )
    group.addoption(
        "--polarion-project-id",
        dest="polarion_project_id",
        help="Set Polarion project ID",
    )
    group.addoption(
        "--polarion-report-file",
        dest="polarion_report_file",
        help="Set Polarion report file path (default: polarion_results.xml)",
    )
    group.addoption(
        "--polarion-custom-plannedin",
        dest="polarion_planned_in",
        help="Set Polarion planned-in ID",
    )
    group.addoption(
        "--test-tier",
        dest="polarion_tier",
        help="Set test tier number",
    )
    group.addoption(
        "--polarion-config",
        dest="polarion_config",
        help="YAML file with Polarion reporter settings",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the reporter when execution is enabled."""
    if not (config.getoption("polarion_execution") or config.getoption("polarion_config")):
        return
    # xdist workers forward their reports to the controller
    if hasattr(config, "workerinput"):
        return

    try:
        run_config = RunConfiguration.from_pytest_config(config)
    except ConfigurationError as exc:
        click.echo(click.style(str(exc), fg="red"), err=True)
        return

    if run_config.enabled:
        config.pluginmanager.register(PolarionPlugin(LifecycleAdapter(run_config)), PLUGIN_NAME)


def pytest_unconfigure(config: pytest.Config) -> None:
    """Drop the reporter registered for this run."""
    plugin = config.pluginmanager.get_plugin(PLUGIN_NAME)
    if plugin is not None:
        config.pluginmanager.unregister(plugin)


def component_texts(top_level: str, nodeid: str) -> list[str]:
    """Nesting path of a test: the session label, then each node id part.

    Parametrize ids may contain ``::`` themselves, so only the part before
    the first ``[`` is split and the id stays on the last segment.
    """
    path, bracket, params = nodeid.partition("[")
    parts = path.split("::")
    parts[-1] += bracket + params
    return [top_level, *parts]


class PolarionPlugin:
    """Forwards pytest hooks to a lifecycle listener."""

    def __init__(self, listener: LifecycleListener):
        self.listener = listener
        self.top_level = ""

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        """Start the suite, labelled with the rootdir name."""
        self.top_level = session.config.rootpath.name
        self.listener.suite_will_begin(SuiteSummary(suite_description=self.top_level))

    def pytest_collection_finish(self, session: pytest.Session) -> None:
        """Signal that suite setup (collection) is done."""
        self.listener.before_suite_did_run(SetupSummary(state="collected"))

    def pytest_runtest_logstart(self, nodeid: str, location) -> None:
        """Announce a test about to run."""
        self.listener.spec_will_run(SpecSummary(component_texts=component_texts(self.top_level, nodeid)))

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        """Record each test once, when its outcome is known."""
        # A test whose setup failed or skipped never reaches the call phase
        if report.when == "call" or (report.when == "setup" and not report.passed):
            self.listener.spec_did_complete(
                SpecSummary(component_texts=component_texts(self.top_level, report.nodeid))
            )

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        """Finish the suite and write the report."""
        self.listener.after_suite_did_run(SetupSummary(state=str(int(exitstatus))))
        self.listener.suite_did_end(SuiteSummary(suite_description=session.config.rootpath.name))
