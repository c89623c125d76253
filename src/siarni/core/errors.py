class SiarniError(Exception):
    """Base error for all user-facing SI-ARNI exceptions."""


class ConfigurationError(SiarniError):
    """Raised when configuration is invalid or incomplete."""


class ProjectNotInitializedError(SiarniError):
    """Raised when .siarni metadata is missing."""


class ValidationError(SiarniError):
    """Raised when a record draft is missing required fields."""


class RecordNotFoundError(SiarniError):
    """Raised when a record or attachment cannot be located."""


class AttachmentError(SiarniError):
    """Raised when a scanned document cannot be archived."""


class ExtractionError(SiarniError):
    """Raised when AI field extraction fails."""
