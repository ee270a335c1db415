"""Exceptions raised by Sentipulse."""


class SentipulseError(Exception):
    """Base class for all Sentipulse errors."""


class RunInProgressError(SentipulseError):
    """An analysis run is already active on this pipeline."""


class ColumnNotFoundError(SentipulseError, ValueError):
    """A selected column does not exist in the dataset."""

    def __init__(self, column: str, available):
        self.column = column
        self.available = list(available)
        super().__init__(f"Column '{column}' not found. Available columns: {self.available}")


class UnsupportedFileError(SentipulseError, ValueError):
    """The input file type cannot be ingested."""


class InvalidAnalysisFileError(SentipulseError, ValueError):
    """A loaded file is not an exported analysis."""


class ProjectSaveError(SentipulseError):
    """A project could not be persisted."""


class ProjectNotFoundError(SentipulseError, KeyError):
    """No saved project exists under the given id."""

    def __str__(self):
        return f"Project {self.args[0]!r} not found"
