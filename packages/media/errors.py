"""Classified upload errors."""

from enum import Enum

from fastapi import status

from packages.shared.exceptions import AppException


class UploadErrorKind(str, Enum):
    """
    Kinds of terminal upload failures.

    Validation kinds are the caller's fault and are not retryable without
    changing the input. Transport failures may be transient.
    """

    NO_FILE_PROVIDED = "no_file_provided"
    DISALLOWED_FILE_TYPE = "disallowed_file_type"
    FILE_TOO_LARGE = "file_too_large"
    TRANSPORT_FAILURE = "transport_failure"


# Human-readable error messages
ERROR_MESSAGES: dict[UploadErrorKind, str] = {
    UploadErrorKind.NO_FILE_PROVIDED: "No file provided",
    UploadErrorKind.DISALLOWED_FILE_TYPE: "File type is not allowed",
    UploadErrorKind.FILE_TOO_LARGE: "File size exceeds the limit",
    UploadErrorKind.TRANSPORT_FAILURE: "Failed to store file",
}


def get_error_message(kind: UploadErrorKind, detail: str | None = None) -> str:
    """
    Get human-readable error message for an error kind.

    Args:
        kind: The error kind
        detail: Optional additional detail to append

    Returns:
        Human-readable error message
    """
    base_message = ERROR_MESSAGES.get(kind, f"Unknown error: {kind}")
    if detail:
        return f"{base_message}: {detail}"
    return base_message


class UploadError(AppException):
    """Base class for upload failures. Never carries a stored reference."""

    kind: UploadErrorKind = UploadErrorKind.TRANSPORT_FAILURE
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(self, detail: str | None = None, message: str | None = None) -> None:
        super().__init__(
            message=message or get_error_message(self.kind, detail),
            status_code=self.http_status,
            detail={"kind": self.kind.value, "retryable": self.retryable},
        )


class NoFileProvidedError(UploadError):
    kind = UploadErrorKind.NO_FILE_PROVIDED
    http_status = status.HTTP_400_BAD_REQUEST


class DisallowedFileTypeError(UploadError):
    kind = UploadErrorKind.DISALLOWED_FILE_TYPE
    http_status = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class FileTooLargeError(UploadError):
    kind = UploadErrorKind.FILE_TOO_LARGE
    http_status = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class TransportFailureError(UploadError):
    """The backend write failed after validation passed."""

    kind = UploadErrorKind.TRANSPORT_FAILURE
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
