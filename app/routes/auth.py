"""
Endpoints de autenticación: registro, login, logout y token CSRF.

Seguridad de sesiones:
- Sesión de servidor en Redis, cookie HttpOnly 'session_id' con el id opaco
- Expiración deslizante de 1 hora
- Token CSRF guardado en la sesión, enviado por el frontend en X-CSRF-Token
"""
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from core.database import get_db
from core.cookie_auth import set_session_cookie, clear_session_cookie, get_session_id_from_request
from core.csrf_protection import generate_csrf_token
from core.dependencies import get_session_user, login_rate_limit
from core.redis_service import SessionService
from models.user import User
from schemas.auth import UserRegister, UserLogin
from services.user_service import UserService, serialize_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


# ==================== REGISTRO ====================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """
    Registrar un nuevo usuario (rol customer o vendor).
    """
    user = UserService(db).register(user_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "User registered successfully",
        "data": serialize_user(user)
    }


# ==================== LOGIN / LOGOUT ====================

@router.post("/login", dependencies=[Depends(login_rate_limit)])
async def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Iniciar sesión con email y contraseña.

    - Máximo 5 intentos por minuto por IP
    - Crea una sesión nueva en Redis (la sesión anónima previa se descarta)
    - Establece la cookie HttpOnly 'session_id'
    - Retorna el token CSRF que el frontend debe enviar en X-CSRF-Token
    """
    user = UserService(db).authenticate(credentials.email, credentials.password)

    # Nueva sesión en cada login (evita fijación de sesión)
    SessionService.destroy_session(get_session_id_from_request(request))

    csrf_token = generate_csrf_token()
    session_id = SessionService.create_session({
        "user_id": str(user.id),
        "email": user.email,
        "csrf_token": csrf_token,
    })
    set_session_cookie(response, session_id)

    logger.info(f"Login exitoso: {user.id}")

    return {
        "success": True,
        "status_code": 200,
        "message": "Login successful",
        "data": {
            "user": serialize_user(user),
            "csrf_token": csrf_token
        }
    }


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_session_user)
):
    """
    Cerrar sesión: elimina la sesión de Redis y la cookie.
    """
    SessionService.destroy_session(get_session_id_from_request(request))
    clear_session_cookie(response)

    logger.info(f"Logout: {current_user.id}")

    return {
        "success": True,
        "status_code": 200,
        "message": "Logout successful",
        "data": None
    }


# ==================== CSRF ====================

@router.get("/csrf-token")
async def get_csrf_token(
    request: Request,
    response: Response
):
    """
    Obtener el token CSRF de la sesión actual.
    Si no hay sesión se crea una anónima que solo guarda el token.
    """
    session_id = get_session_id_from_request(request)
    session = SessionService.get_session(session_id)

    if session and session.get("csrf_token"):
        csrf_token = session["csrf_token"]
        SessionService.touch(session_id)
    elif session:
        csrf_token = generate_csrf_token()
        session["csrf_token"] = csrf_token
        SessionService.update_session(session_id, session)
    else:
        csrf_token = generate_csrf_token()
        session_id = SessionService.create_session({"csrf_token": csrf_token})

    set_session_cookie(response, session_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "CSRF token generated",
        "data": {
            "csrf_token": csrf_token
        }
    }
