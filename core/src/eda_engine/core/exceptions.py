"""Engine error taxonomy.

Input problems in agent tool arguments are reported as tool output strings,
not raised. The exceptions below cover resource failures that callers must
handle explicitly.
"""


class EngineError(Exception):
    """Base class for engine errors."""


class SourceNotFoundError(EngineError, FileNotFoundError):
    """The backing row source cannot be located or opened."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class UnsupportedSourceError(EngineError):
    """The file exists but is not a tabular format the row source can read."""


class ChartRequestError(EngineError):
    """A chart request could not be normalized into a valid ChartRequest."""
