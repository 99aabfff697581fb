class AppError(Exception):
    """Base application exception."""

    status = 500

    def __init__(self, message: str, code: str = "APP_ERROR", status: int = None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status is not None:
            self.status = status


class ValidationError(AppError):
    status = 400

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code)


class NotFoundError(AppError):
    status = 404

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message, code)


class ConflictError(AppError):
    status = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code)


class PermissionDeniedError(AppError):
    status = 403

    def __init__(self, message: str, code: str = "FORBIDDEN"):
        super().__init__(message, code)


class StorageError(AppError):
    """Object storage call failed (upload / remove / list)."""

    status = 500

    def __init__(self, message: str, code: str = "STORAGE_ERROR"):
        super().__init__(message, code)


class AuthenticationError(AppError):
    status = 401

    def __init__(self, message: str, code: str = "UNAUTHORIZED"):
        super().__init__(message, code)
