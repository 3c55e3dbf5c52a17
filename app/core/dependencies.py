"""
Dependencias de autenticación para FastAPI.

La autenticación es por sesión de servidor:
1. El navegador envía la cookie HttpOnly 'session_id'
2. La sesión se busca en Redis (sess:<id>) -> {user_id, email, csrf_token}
3. El usuario se vuelve a leer de la base de datos en cada petición
   (rol y estado siempre frescos)

Cada petición autenticada renueva el TTL de la sesión y re-emite la cookie.
"""
import logging
import uuid
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session
from core.config import settings
from core.database import get_db
from core.cookie_auth import get_session_id_from_request, set_session_cookie
from core.exceptions import UnauthorizedError, ForbiddenError, TooManyRequestsError
from core.redis_service import SessionService, RateLimitService
from models.user import User, UserRole
from services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_session_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    """
    Usuario de la sesión actual, sin renovar la sesión ni re-emitir la cookie.
    La usa logout.
    """
    session_id = get_session_id_from_request(request)
    session = SessionService.get_session(session_id)

    if not session or not session.get("user_id"):
        raise UnauthorizedError("Authentication required", "AUTHENTICATION_REQUIRED")

    try:
        user_id = uuid.UUID(session["user_id"])
    except ValueError:
        raise UnauthorizedError("Invalid session", "INVALID_SESSION")

    user = UserService(db).find_by_id(user_id)

    if not user:
        # Usuario eliminado o desactivado: la sesión ya no sirve
        SessionService.destroy_session(session_id)
        raise UnauthorizedError("User not found", "USER_NOT_FOUND")

    # El middleware de auditoría lee el usuario de aquí
    request.state.user_id = str(user.id)

    return user


async def get_current_user(
    request: Request,
    response: Response,
    user: User = Depends(get_session_user)
) -> User:
    """
    Obtener el usuario autenticado y renovar la sesión (expiración deslizante).

    Uso:
        @router.get("/profile")
        async def get_profile(current_user: User = Depends(get_current_user)):
            ...
    """
    session_id = get_session_id_from_request(request)
    SessionService.touch(session_id)
    set_session_cookie(response, session_id)

    return user


def require_roles(*roles: UserRole):
    """
    Guard de roles.

    Uso:
        @router.post("", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"Acceso denegado: usuario {current_user.id} con rol {current_user.role.value} "
                f"(requiere {', '.join(r.value for r in roles)})"
            )
            raise ForbiddenError("You do not have permission to perform this action", "INSUFFICIENT_ROLE")
        return current_user

    return role_checker


async def get_current_admin_user(
    current_user: User = Depends(require_roles(UserRole.ADMIN))
) -> User:
    """
    Verificar que el usuario autenticado sea administrador.
    """
    return current_user


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def login_rate_limit(request: Request) -> None:
    """
    Limitar intentos de login por IP (5 por minuto por defecto).
    """
    client_ip = get_client_ip(request)
    allowed = RateLimitService.hit(
        f"login:{client_ip}",
        settings.LOGIN_RATE_LIMIT,
        settings.LOGIN_RATE_WINDOW_SECONDS
    )
    if not allowed:
        logger.warning(f"Rate limit de login excedido para {client_ip}")
        raise TooManyRequestsError("Too many login attempts, please try again later")
