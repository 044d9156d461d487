"""Error taxonomy shared by the services and the HTTP layer.

Each error carries the HTTP status it is reported with; ``main.py`` renders
all of them as ``{"success": false, "error": <message>}``.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidError(ServiceError):
    status_code = 400


class AuthError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class DuplicateRequestError(ConflictError):
    # clients key off 400 for "already requested"
    status_code = 400


class UnavailableError(ServiceError):
    status_code = 503
