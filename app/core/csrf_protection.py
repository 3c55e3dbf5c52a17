"""
Middleware y utilidades para protección CSRF.

El token CSRF vive dentro de la sesión en Redis. El frontend lo obtiene en el
login (o en GET /auth/csrf-token) y lo reenvía en el header X-CSRF-Token en
cada petición mutante.
"""
import secrets
import hmac
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Optional, Set
from core.config import settings
from core.cookie_auth import get_session_id_from_request
from core.redis_service import SessionService


# Métodos HTTP que modifican datos y requieren protección CSRF
CSRF_PROTECTED_METHODS: Set[str] = {"POST", "PUT", "PATCH", "DELETE"}

# El login y el registro crean la sesión, todavía no hay token que comparar
CSRF_EXEMPT_PATHS: Set[str] = {
    "/auth/login",
    "/auth/register",
}

CSRF_HEADER_NAME = "X-CSRF-Token"


def generate_csrf_token() -> str:
    """
    Generar un token CSRF criptográficamente seguro (32 bytes en hex).
    """
    return secrets.token_hex(32)


def validate_csrf_token(session_token: Optional[str], header_token: Optional[str]) -> bool:
    """
    Validar que el token del header coincida con el de la sesión.
    Comparación de tiempo constante.
    """
    if not session_token or not header_token:
        return False

    return hmac.compare_digest(session_token, header_token)


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Middleware para protección CSRF.

    Solo aplica cuando:
    - El método HTTP es mutante (POST, PUT, PATCH, DELETE)
    - La petición trae cookie de sesión y la sesión existe en Redis

    Sin sesión no hay nada que falsificar; la ruta responderá 401 si la exige.
    """

    async def dispatch(self, request: Request, call_next):
        if not settings.CSRF_ENABLED or request.method not in CSRF_PROTECTED_METHODS:
            return await call_next(request)

        if request.url.path in CSRF_EXEMPT_PATHS:
            return await call_next(request)

        session = SessionService.get_session(get_session_id_from_request(request))

        if session:
            csrf_header = request.headers.get(CSRF_HEADER_NAME)

            if not validate_csrf_token(session.get("csrf_token"), csrf_header):
                return JSONResponse(
                    status_code=status.HTTP_403_FORBIDDEN,
                    content={
                        "success": False,
                        "status_code": 403,
                        "message": "Invalid or missing CSRF token",
                        "error": "CSRF_VALIDATION_FAILED"
                    }
                )

        return await call_next(request)
