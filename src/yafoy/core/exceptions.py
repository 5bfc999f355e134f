"""Domain errors raised by services and translated to HTTP errors by routers."""


class ServiceError(ValueError):
    """Base error carrying a machine code and a user-facing message."""

    status_code = 400

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(ServiceError):
    status_code = 404


class PermissionDeniedError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    status_code = 409


class ContentRejectedError(ServiceError):
    status_code = 422


class StorageUnavailableError(ServiceError):
    """A database or storage write failed; prior state is preserved."""

    status_code = 503


class PayloadTooLargeError(ServiceError):
    status_code = 413
