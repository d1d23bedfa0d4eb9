"""Exceptions raised by loadcompare."""


class LoadCompareError(Exception):
    """Base class for loadcompare errors."""


class UnknownScenarioError(LoadCompareError, ValueError):
    """Raised when a scenario name is not in the configured scenario list."""

    def __init__(self, scenario: str, known: tuple[str, ...] = ()) -> None:
        self.scenario = scenario
        self.known = known
        super().__init__(f"Invalid scenario: {scenario}")


class ResultsDirectoryNotFoundError(LoadCompareError, FileNotFoundError):
    """Raised when a command requires a results directory that is missing."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Results directory not found: {path}")
