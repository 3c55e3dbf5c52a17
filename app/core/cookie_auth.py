"""
Cookie de sesión HttpOnly.

La cookie solo lleva el id opaco de la sesión; los datos viven en Redis.
- HttpOnly: JavaScript no puede leerla
- Secure: solo por HTTPS en producción
- SameSite=lax
"""
from fastapi import Response, Request
from typing import Optional
from core.config import settings


def get_cookie_settings() -> dict:
    """
    Configuración de la cookie según el entorno.
    """
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
        "max_age": settings.SESSION_TTL_SECONDS,
        "path": "/",
        "domain": settings.COOKIE_DOMAIN if settings.is_production else None,
    }


def set_session_cookie(response: Response, session_id: str) -> None:
    """Emitir (o re-emitir) la cookie de sesión"""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        **get_cookie_settings()
    )


def clear_session_cookie(response: Response) -> None:
    """Eliminar la cookie de sesión"""
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        domain=settings.COOKIE_DOMAIN if settings.is_production else None,
    )


def get_session_id_from_request(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)
