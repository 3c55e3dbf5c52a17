"""
Utilidades para seguridad: contraseñas y tokens aleatorios.
"""
import secrets
import bcrypt
from core.config import settings


# ==================== PASSWORD HASHING ====================

def hash_password(password: str) -> str:
    """
    Hash password usando bcrypt.
    Genera un hash de 60 caracteres.
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verificar si una contraseña coincide con su hash.
    """
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


# ==================== TOKENS ====================

def generate_session_id() -> str:
    """
    Generar un identificador de sesión opaco (256 bits, URL-safe).
    """
    return secrets.token_urlsafe(32)
