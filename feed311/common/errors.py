"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for feed failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class DecodeError(PipelineError):
    """Raised when the feed is empty or has no header row."""

    error_code = "DECODE_ERROR"


class TransportError(PipelineError):
    """Raised when the feed cannot be retrieved."""

    error_code = "TRANSPORT_ERROR"


class ValidationError(PipelineError):
    """Raised for a single row that does not match the incident schema."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, row_number: int | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.field = field


class CoordinateParseError(PipelineError):
    """Raised when latitude/longitude cannot be placed on a map."""

    error_code = "COORDINATE_ERROR"
