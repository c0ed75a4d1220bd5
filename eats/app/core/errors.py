"""Error taxonomy shared by the service layer."""

import enum


class ErrorKind(str, enum.Enum):
    """Category of a failed service operation."""

    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_CREDENTIAL = "invalid_credential"
    DEPENDENCY_FAILURE = "dependency_failure"


class ServiceError(Exception):
    """Raised below the service boundary; never escapes a service method."""

    kind: ErrorKind = ErrorKind.DEPENDENCY_FAILURE

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class DuplicateAccountError(ServiceError):
    kind = ErrorKind.CONFLICT


class UserNotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
