"""In-memory report model for a single test-suite run."""

from pydantic import BaseModel, ConfigDict


class PropertyEntry(BaseModel):
    """Run-level metadata property."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class TestCaseRecord(BaseModel):
    """A test case that completed during the run."""
    __test__ = False
    model_config = ConfigDict(frozen=True)

    name: str


class ReportModel:
    """Properties plus the test cases recorded so far, in completion order.

    The model only accumulates: there is no way to update or remove a
    record once it has been added.
    """

    def __init__(self):
        self.suite_name = ""
        self.properties: list[PropertyEntry] = []
        self.test_cases: list[TestCaseRecord] = []

    def initialize(self, properties: list[PropertyEntry], suite_name: str = "") -> None:
        """Replace all state with a fresh run."""
        self.suite_name = suite_name
        self.properties = list(properties)
        self.test_cases = []

    def record_test_case(self, name: str) -> TestCaseRecord:
        record = TestCaseRecord(name=name)
        self.test_cases.append(record)
        return record

    @property
    def names(self) -> list[str]:
        return [case.name for case in self.test_cases]
