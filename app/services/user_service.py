"""
Directorio de usuarios: registro, autenticación y perfil.
"""
import logging
import uuid
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from core.security import hash_password, verify_password
from models.user import User
from schemas.auth import UserRegister
from schemas.users import UserUpdateProfile

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    """Vista pública del usuario (nunca incluye el hash de la contraseña)"""
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "role": user.role.value,
        "is_active": user.is_active,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = self.db.query(User).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def _phone_taken(self, phone: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = self.db.query(User).filter(User.phone == phone)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            # Otra petición ganó la carrera entre la verificación y el insert
            self.db.rollback()
            raise ConflictError(conflict_message)

    def register(self, data: UserRegister) -> User:
        if self._email_taken(data.email):
            raise ConflictError("Email already exists", "EMAIL_ALREADY_EXISTS")

        if data.phone and self._phone_taken(data.phone):
            raise ConflictError("Phone already exists", "PHONE_ALREADY_EXISTS")

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            role=data.role,
            is_active=True
        )
        self.db.add(user)
        self._commit("Email already exists")
        self.db.refresh(user)

        logger.info(f"Usuario registrado: {user.id} ({user.role.value})")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Verificar credenciales.

        El mismo error para email inexistente, contraseña incorrecta
        o usuario inactivo.
        """
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()

        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            logger.warning(f"Login fallido para {email}")
            raise UnauthorizedError("Invalid email or password", "INVALID_CREDENTIALS")

        return user

    def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.db.query(User).filter(
            User.id == user_id,
            User.is_active == True
        ).first()

    def update_profile(self, user_id: uuid.UUID, data: UserUpdateProfile) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found", "USER_NOT_FOUND")

        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("email") and update_data["email"] != user.email:
            if self._email_taken(update_data["email"], exclude_id=user.id):
                raise ConflictError("Email already exists", "EMAIL_ALREADY_EXISTS")

        if update_data.get("phone") and update_data["phone"] != user.phone:
            if self._phone_taken(update_data["phone"], exclude_id=user.id):
                raise ConflictError("Phone already exists", "PHONE_ALREADY_EXISTS")

        for field, value in update_data.items():
            if field in ("first_name", "last_name", "email") and value is None:
                continue
            setattr(user, field, value)

        self._commit("Email or phone already exists")
        self.db.refresh(user)
        return user
