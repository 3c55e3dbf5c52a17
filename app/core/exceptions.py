"""
Errores tipados de la aplicación.

Los servicios lanzan estas excepciones; main.py las convierte al formato
estándar de respuesta:

    {"success": false, "status_code": 404, "message": "...", "error": "NOT_FOUND"}
"""
from typing import Optional


class AppException(Exception):
    """Error base con código HTTP y código de error legible por el frontend"""

    status_code: int = 500
    error: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error:
            self.error = error

    def to_dict(self) -> dict:
        return {
            "success": False,
            "status_code": self.status_code,
            "message": self.message,
            "error": self.error,
        }


class BadRequestError(AppException):
    status_code = 400
    error = "BAD_REQUEST"


class UnauthorizedError(AppException):
    status_code = 401
    error = "UNAUTHORIZED"


class ForbiddenError(AppException):
    status_code = 403
    error = "FORBIDDEN"


class NotFoundError(AppException):
    status_code = 404
    error = "NOT_FOUND"


class ConflictError(AppException):
    status_code = 409
    error = "CONFLICT"


class TooManyRequestsError(AppException):
    status_code = 429
    error = "TOO_MANY_REQUESTS"
