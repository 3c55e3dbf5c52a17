"""
Schemas para categorías.
"""
import uuid
from pydantic import BaseModel, Field, validator
from typing import Optional


SLUG_PATTERN = r"^[a-z0-9-]+$"

# Rutas fijas bajo /categories/ que GET /categories/{slug} no puede alcanzar
RESERVED_SLUGS = {"categories", "tree", "id"}


def check_reserved_slug(slug: Optional[str]) -> Optional[str]:
    if slug in RESERVED_SLUGS:
        raise ValueError(f"Slug '{slug}' is reserved")
    return slug


class CategoryCreate(BaseModel):
    """Schema para crear categoría"""
    name: str = Field(..., min_length=2, max_length=100, description="Nombre de la categoría")
    slug: str = Field(..., min_length=2, max_length=100, pattern=SLUG_PATTERN, description="Slug URL-friendly")
    description: Optional[str] = Field(None, max_length=500, description="Descripción de la categoría")
    image_url: Optional[str] = Field(None, max_length=255, description="URL de la imagen")
    parent_id: Optional[uuid.UUID] = Field(None, description="Categoría padre (None = raíz)")
    sort_order: int = Field(0, ge=0, description="Orden entre hermanos")

    @validator('slug')
    def not_reserved(cls, v):
        return check_reserved_slug(v)


class CategoryUpdate(BaseModel):
    """Schema para actualizar categoría (solo los campos enviados)"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=255)
    parent_id: Optional[uuid.UUID] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @validator('slug')
    def not_reserved(cls, v):
        return check_reserved_slug(v)
