"""Run configuration for the Polarion reporter."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError
from .models import PropertyEntry

DEFAULT_REPORT_FILE = "polarion_results.xml"

# pytest option dest -> RunConfiguration field
OPTION_FIELDS = {
    "polarion_execution": "enabled",
    "polarion_project_id": "project_id",
    "polarion_report_file": "report_file",
    "polarion_planned_in": "planned_in",
    "polarion_tier": "tier",
}


class RunConfiguration(BaseModel):
    """Settings for one reported run."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    project_id: str = ""
    planned_in: str = ""
    tier: str = ""
    report_file: str = DEFAULT_REPORT_FILE
    enabled: bool = False

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "RunConfiguration":
        """Load configuration from a YAML file, then apply overrides."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read configuration file {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc

    @classmethod
    def from_pytest_config(cls, config) -> "RunConfiguration":
        """Build configuration from pytest command-line options.

        Options left unset on the command line fall back to the YAML file
        given with ``--polarion-config``, then to the field defaults.
        """
        overrides = {}
        for dest, field in OPTION_FIELDS.items():
            value = config.getoption(dest, default=None)
            if value is not None:
                overrides[field] = value

        config_file = config.getoption("polarion_config", default=None)
        if config_file:
            return cls.from_file(config_file, **overrides)
        return cls(**overrides)

    @property
    def testrun_id(self) -> str:
        return f"{self.planned_in}_{self.tier}"

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty."""
        missing = []
        if not self.project_id:
            missing.append("project_id")
        if not self.planned_in:
            missing.append("planned_in")
        return missing

    def validate_required(self) -> None:
        """Raise ConfigurationError if a report cannot be produced."""
        if not self.project_id:
            raise ConfigurationError("Can not create Polarion report without project ID")
        if not self.planned_in:
            raise ConfigurationError("Can not create Polarion report without planned-in ID")

    def properties(self) -> list[PropertyEntry]:
        """Run-level properties in their fixed output order."""
        return [
            PropertyEntry(name="project-id", value=self.project_id),
            PropertyEntry(name="testcase-lookup-method", value="name"),
            PropertyEntry(name="custom-plannedin", value=self.planned_in),
            PropertyEntry(name="testrun-id", value=self.testrun_id),
            PropertyEntry(name="custom-isautomated", value="True"),
        ]
