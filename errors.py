# errors.py


class ServiceError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"success": False, "error": self.message}


class ValidationError(ServiceError):
    status_code = 400
    message = "Validation error"

    def __init__(self, fields, message=None):
        super().__init__(message)
        self.fields = dict(fields)

    def to_dict(self):
        data = super().to_dict()
        data["details"] = self.fields
        return data


class InvalidCredentials(ServiceError):
    # Identifier not found, wrong password and inactive account all look the same
    status_code = 401
    message = "Invalid credentials"

    def __init__(self):
        super().__init__(self.message)


class AuthorizationError(ServiceError):
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(ServiceError):
    status_code = 403
    message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    message = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    message = "Already exists"

    def __init__(self, message=None, retryable=True):
        super().__init__(message)
        self.retryable = retryable

    def to_dict(self):
        data = super().to_dict()
        data["retryable"] = self.retryable
        return data
