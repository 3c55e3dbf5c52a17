"""
Schemas de autenticación.
"""
import re
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from models.user import UserRole


PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")

# Los admins se crean con scripts/seed_db.py, nunca por registro público
REGISTRABLE_ROLES = {UserRole.CUSTOMER, UserRole.VENDOR}


def validate_strong_password(v: str) -> str:
    """Al menos una mayúscula, una minúscula y un número"""
    if not any(char.isdigit() for char in v):
        raise ValueError('Password must contain at least one number')
    if not any(char.isupper() for char in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(char.islower() for char in v):
        raise ValueError('Password must contain at least one lowercase letter')
    return v


def normalize_email(v):
    """Trim + minúsculas antes de validar el formato"""
    if isinstance(v, str):
        return v.strip().lower()
    return v


def validate_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not PHONE_PATTERN.match(v):
        raise ValueError('Phone must be 7 to 15 digits, optionally prefixed with +')
    return v


# ==================== AUTH SCHEMAS ====================

class UserRegister(BaseModel):
    """Schema para registro de usuario"""
    email: EmailStr = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=8, max_length=100, description="Contraseña (mínimo 8 caracteres)")
    first_name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    last_name: str = Field(..., min_length=1, max_length=100, description="Apellido")
    phone: Optional[str] = Field(None, description="Teléfono (opcional, único)")
    role: UserRole = Field(UserRole.CUSTOMER, description="customer o vendor")

    @validator('email', pre=True)
    def clean_email(cls, v):
        return normalize_email(v)

    @validator('password')
    def check_password(cls, v):
        """Validar que la contraseña sea fuerte"""
        return validate_strong_password(v)

    @validator('phone')
    def check_phone(cls, v):
        return validate_phone(v)

    @validator('first_name', 'last_name')
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be empty')
        return v

    @validator('role')
    def check_role(cls, v):
        if v not in REGISTRABLE_ROLES:
            raise ValueError('Role must be customer or vendor')
        return v


class UserLogin(BaseModel):
    """Schema para login de usuario"""
    email: EmailStr = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=1, description="Contraseña")

    @validator('email', pre=True)
    def clean_email(cls, v):
        return normalize_email(v)
