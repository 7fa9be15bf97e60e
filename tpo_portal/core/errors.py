"""
Error taxonomy shared by services and routes.

Services raise these; the handlers registered in ``tpo_portal.main`` turn
them into ``{"error": ...}`` JSON bodies with the matching status code.
"""


class PortalError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal server error", status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(PortalError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class Forbidden(PortalError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class InvalidArgument(PortalError):
    status_code = 400


class NotFound(PortalError):
    status_code = 404


class StoreError(PortalError):
    """Store query/write failure. 400 for client-triggered writes, 500 otherwise."""


class InternalError(PortalError):
    status_code = 500
