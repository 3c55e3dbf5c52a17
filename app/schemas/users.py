"""
Schema de usuarios
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from schemas.auth import normalize_email, validate_phone


# ==================== USER SCHEMAS ====================

class UserUpdateProfile(BaseModel):
    """Actualizar perfil de usuario (solo los campos enviados)"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Nombre")
    last_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Apellido")
    email: Optional[EmailStr] = Field(None, description="Nuevo email")
    phone: Optional[str] = Field(None, description="Nuevo teléfono")

    @validator('email', pre=True)
    def clean_email(cls, v):
        return normalize_email(v)

    @validator('phone')
    def check_phone(cls, v):
        return validate_phone(v)

    @validator('first_name', 'last_name')
    def validate_name(cls, v):
        """Validar y limpiar nombre"""
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Name cannot be empty')
        return v
