"""CLI commands for the Polarion reporter."""

import sys

import click

from .config import RunConfiguration
from .errors import PolarionReportError
from .reporter import parse_report
from .runner import TestRunner


def load_config(config_file: str | None, **overrides) -> RunConfiguration:
    """Load configuration from an optional YAML file plus CLI overrides."""
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if config_file:
        return RunConfiguration.from_file(config_file, **overrides)
    return RunConfiguration(**overrides)


@click.group()
@click.version_option(package_name="polarion-report")
def main():
    """polarion-report - Polarion XML results for pytest runs."""
    pass


@main.command(context_settings={"ignore_unknown_options": True})
@click.option("-f", "--config", "config_file", help="Path to a YAML reporter config")
@click.option("--project-id", help="Polarion project ID")
@click.option("--planned-in", help="Polarion planned-in ID")
@click.option("--tier", help="Test tier label")
@click.option("--report-file", help="Report output path")
@click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)
def test(
    config_file: str | None,
    project_id: str | None,
    planned_in: str | None,
    tier: str | None,
    report_file: str | None,
    pytest_args: tuple[str, ...],
):
    """Run pytest with Polarion reporting enabled."""
    try:
        config = load_config(
            config_file,
            project_id=project_id,
            planned_in=planned_in,
            tier=tier,
            report_file=report_file,
            enabled=True,
        )
    except PolarionReportError as exc:
        click.echo(click.style(str(exc), fg="red"), err=True)
        sys.exit(2)

    missing = config.missing_fields()
    if missing:
        click.echo(
            click.style(f"No report will be written, missing: {', '.join(missing)}", fg="yellow")
        )

    click.echo(f"Running tests (report: {config.report_file})...")

    runner = TestRunner(config, config_file=config_file, pytest_args=pytest_args)
    exit_code = runner.run()

    if exit_code == 0:
        click.echo(click.style("All tests passed!", fg="green"))
    else:
        click.echo(click.style(f"Tests failed (exit code: {exit_code})", fg="red"))

    sys.exit(exit_code)


@main.command()
@click.argument("report_file")
def show(report_file: str):
    """Print the properties and test cases of a Polarion report."""
    try:
        model = parse_report(report_file)
    except PolarionReportError as exc:
        click.echo(click.style(str(exc), fg="red"), err=True)
        sys.exit(1)

    click.echo("Properties:")
    for prop in model.properties:
        click.echo(f"  {prop.name} = {prop.value}")

    click.echo(f"Test cases ({len(model.test_cases)}):")
    for name in model.names:
        click.echo(f"  {name}")


@main.command()
@click.option("-f", "--config", "config_file", required=True, help="Path to a YAML reporter config")
def check(config_file: str):
    """Validate a reporter configuration file."""
    try:
        config = RunConfiguration.from_file(config_file)
    except PolarionReportError as exc:
        click.echo(click.style(str(exc), fg="red"), err=True)
        sys.exit(1)

    missing = config.missing_fields()
    if missing:
        click.echo(click.style(f"Missing required fields: {', '.join(missing)}", fg="red"))
        sys.exit(1)

    click.echo(click.style(f"Configuration OK (testrun-id: {config.testrun_id})", fg="green"))


if __name__ == "__main__":
    main()
