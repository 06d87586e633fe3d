class ReportError(Exception):
    """Base class for report engine errors."""


class ReportFetchError(ReportError):
    """The reporting API could not deliver a report."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ReportValidationError(ReportFetchError):
    """The API answered, but the payload does not match the report schema."""


class ExportError(ReportError):
    """Writing, rendering or sharing an export failed."""
