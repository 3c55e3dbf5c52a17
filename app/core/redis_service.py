"""
Servicios sobre Redis.

Redis guarda las sesiones de servidor (volátiles, con expiración deslizante)
y los contadores del rate limiting del login.
PostgreSQL guarda todo lo demás.
"""
import json
import redis
from typing import Optional
from core.config import settings
from core.security import generate_session_id

# Conexión a Redis
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class SessionService:
    """Servicio para gestionar sesiones de servidor en Redis"""

    @staticmethod
    def _get_session_key(session_id: str) -> str:
        """Generar clave de Redis para una sesión"""
        return f"{settings.SESSION_PREFIX}{session_id}"

    @staticmethod
    def create_session(data: dict) -> str:
        """
        Crear una sesión nueva con el payload dado.

        Returns:
            El id opaco de la sesión (valor de la cookie)
        """
        session_id = generate_session_id()
        redis_client.setex(
            SessionService._get_session_key(session_id),
            settings.SESSION_TTL_SECONDS,
            json.dumps(data)
        )
        return session_id

    @staticmethod
    def get_session(session_id: Optional[str]) -> Optional[dict]:
        """Obtener el payload de una sesión, o None si no existe o expiró"""
        if not session_id:
            return None
        data = redis_client.get(SessionService._get_session_key(session_id))
        return json.loads(data) if data else None

    @staticmethod
    def update_session(session_id: str, data: dict) -> None:
        """Reemplazar el payload y reiniciar el TTL"""
        redis_client.setex(
            SessionService._get_session_key(session_id),
            settings.SESSION_TTL_SECONDS,
            json.dumps(data)
        )

    @staticmethod
    def touch(session_id: str) -> None:
        """Renovar la expiración (sliding expiry)"""
        redis_client.expire(
            SessionService._get_session_key(session_id),
            settings.SESSION_TTL_SECONDS
        )

    @staticmethod
    def destroy_session(session_id: Optional[str]) -> None:
        """Eliminar la sesión"""
        if session_id:
            redis_client.delete(SessionService._get_session_key(session_id))


class RateLimitService:
    """Contadores de ventana fija en Redis"""

    @staticmethod
    def hit(key: str, limit: int, window_seconds: int) -> bool:
        """
        Registrar un intento.

        Returns:
            True si el intento está dentro del límite, False si lo excede
        """
        redis_key = f"ratelimit:{key}"
        count = redis_client.incr(redis_key)
        if count == 1:
            redis_client.expire(redis_key, window_seconds)
        return count <= limit
