"""
Rutas del árbol de categorías.

Lectura: cualquier usuario autenticado.
Escritura: solo administradores.
"""
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from core.database import get_db
from core.dependencies import get_current_user, get_current_admin_user
from models.user import User
from schemas.categories import CategoryCreate, CategoryUpdate
from services.category_service import CategoryService, serialize_category

router = APIRouter(
    prefix="/categories",
    tags=["categories"]
)


# ==================== LECTURA ====================

@router.get("/categories")
async def list_categories(
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(10, ge=1, le=100, description="Items por página"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Listar categorías activas ordenadas por sort_order y nombre.

    - **page**: Número de página (default: 1)
    - **limit**: Categorías por página (default: 10, max: 100)
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Categories retrieved successfully",
        "data": CategoryService(db).find_all(page, limit)
    }


@router.get("/tree")
async def get_category_tree(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Árbol completo de categorías activas (raíces con sus hijos anidados).
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Category tree retrieved successfully",
        "data": CategoryService(db).get_tree()
    }


@router.get("/id/{category_id}")
async def get_category_by_id(
    category_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Obtener una categoría por ID, con su padre y sus hijos.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Category retrieved successfully",
        "data": CategoryService(db).find_one_by_id(category_id)
    }


@router.get("/{category_id}/children")
async def get_category_children(
    category_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Hijos activos directos de una categoría.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Category children retrieved successfully",
        "data": CategoryService(db).get_children(category_id)
    }


@router.get("/{slug}")
async def get_category_by_slug(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Obtener una categoría activa por slug, con breadcrumbs y ruta jerárquica.
    Los slugs "categories", "tree" e "id" están reservados.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Category retrieved successfully",
        "data": CategoryService(db).find_by_slug(slug)
    }


# ==================== ADMIN ====================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Crear una nueva categoría (solo administradores).
    """
    category = CategoryService(db).create(category_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Category created successfully",
        "data": serialize_category(category)
    }


@router.put("/{category_id}")
async def update_category(
    category_id: uuid.UUID,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Actualizar una categoría (solo administradores).
    Mover una categoría bajo sí misma o bajo un descendiente no está permitido.
    """
    category = CategoryService(db).update(category_id, category_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Category updated successfully",
        "data": serialize_category(category)
    }


@router.delete("/{category_id}")
async def delete_category(
    category_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Eliminar una categoría y todo su subárbol (solo administradores).
    """
    CategoryService(db).delete(category_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Category deleted successfully",
        "data": None
    }
