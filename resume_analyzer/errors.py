"""Exception types raised by the analyzer services.

Every error the application surfaces to a user derives from AnalyzerError and
carries the message that is shown to them. The HTTP layer maps each class to a
status code via ``status_code``.
"""


class AnalyzerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AnalyzerError):
    """Bad input, reported inline with no retry."""
    status_code = 400


class AuthError(AnalyzerError):
    status_code = 401


class NotFoundError(AnalyzerError):
    status_code = 404


class ServiceError(AnalyzerError):
    """A managed backend (blob store, record store, extractor) failed."""
    status_code = 502


class StorageError(ServiceError):
    pass


class PersistenceError(ServiceError):
    pass


class ExtractionError(ServiceError):
    pass


class UploadFailedError(ServiceError):
    """Single user-facing failure for the whole upload pipeline."""

    def __init__(self, message: str = "Failed to upload and analyze resume. Please try again."):
        super().__init__(message)
