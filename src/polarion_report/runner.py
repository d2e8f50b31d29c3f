"""Pytest test runner wrapper."""

import subprocess
import sys

from .config import RunConfiguration


class TestRunner:
    """Wrapper for pytest execution with Polarion reporting enabled."""
    __test__ = False

    def __init__(
        self,
        config: RunConfiguration,
        config_file: str | None = None,
        pytest_args: tuple[str, ...] | list[str] = (),
    ):
        self.config = config
        self.config_file = config_file
        self.pytest_args = list(pytest_args)

    def build_pytest_args(self) -> list[str]:
        """Build pytest command arguments."""
        args = [sys.executable, "-m", "pytest", *self.pytest_args, "--polarion-execution"]

        if self.config_file:
            args.extend(["--polarion-config", self.config_file])

        # Explicit values win over the config file inside the plugin
        if self.config.project_id:
            args.extend(["--polarion-project-id", self.config.project_id])
        if self.config.planned_in:
            args.extend(["--polarion-custom-plannedin", self.config.planned_in])
        if self.config.tier:
            args.extend(["--test-tier", self.config.tier])
        args.extend(["--polarion-report-file", self.config.report_file])

        return args

    def run(self) -> int:
        """Execute pytest and return exit code."""
        result = subprocess.run(self.build_pytest_args())
        return result.returncode
