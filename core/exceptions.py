"""Custom exception hierarchy for the service requester."""


class RequesterError(Exception):
    """Base exception for all requester errors.

    Attributes:
        message: Error message
        status_code: HTTP status reported alongside the error
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(RequesterError):
    """Raised when configuration is missing or invalid."""


class BuildError(RequesterError):
    """Captured while assembling a request; reported by send() as an unknown error."""


class SerializationError(BuildError):
    """Payload cannot be encoded to JSON."""


class FileAccessError(BuildError):
    """Named upload field is missing or unreadable.

    Attributes:
        field_name: Form field that was requested
    """

    def __init__(self, message: str, field_name: str) -> None:
        super().__init__(message)
        self.field_name = field_name


class EncodingError(BuildError):
    """Multipart body could not be finalized."""


class RequestConstructionError(BuildError):
    """Method or URL is malformed."""


class TransportError(RequesterError):
    """Network or transport level failure while sending."""


class DecodingError(RequesterError):
    """Response body could not be gzip decoded."""


class DeserializationError(RequesterError):
    """Response body is not valid JSON for the registered model."""


class NonSuccessStatus(RequesterError):
    """Upstream service answered with a status other than 200."""

    def __init__(self, status_code: int) -> None:
        super().__init__("Non-200 status code returned from service call")
        self.status_code = status_code
