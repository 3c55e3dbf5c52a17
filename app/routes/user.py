"""
Rutas del perfil del usuario autenticado.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from core.database import get_db
from core.dependencies import get_current_user
from models.user import User
from schemas.users import UserUpdateProfile
from services.user_service import UserService, serialize_user

router = APIRouter(
    prefix="/users",
    tags=["users"]
)


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user)
):
    """
    Perfil del usuario autenticado.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Profile retrieved successfully",
        "data": serialize_user(current_user)
    }


@router.patch("/profile")
async def update_profile(
    profile_data: UserUpdateProfile,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Actualizar nombre, apellido, email o teléfono.
    Solo se modifican los campos enviados.
    """
    user = UserService(db).update_profile(current_user.id, profile_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Profile updated successfully",
        "data": serialize_user(user)
    }
