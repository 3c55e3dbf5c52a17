"""
Schemas para productos.
"""
import uuid
from pydantic import BaseModel, Field
from typing import Optional, List


# ==================== PRODUCT SCHEMAS ====================

class Dimensions(BaseModel):
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=10)


class ProductImageCreate(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=500)
    alt_text: Optional[str] = Field(None, max_length=255)
    sort_order: int = Field(0, ge=0)
    is_primary: bool = False


class ProductCreate(BaseModel):
    """Schema para crear producto"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre del producto")
    slug: str = Field(..., min_length=1, max_length=255, description="Slug URL-friendly")
    description: str = Field(..., min_length=1, description="Descripción del producto")
    short_description: str = Field(..., min_length=1, max_length=500, description="Resumen")
    sku: str = Field(..., min_length=1, max_length=100, description="SKU único")
    price: float = Field(..., ge=0, description="Precio de venta")
    compare_price: Optional[float] = Field(None, ge=0, description="Precio anterior (debe ser mayor a price)")
    cost_price: Optional[float] = Field(None, ge=0, description="Costo interno")
    stock_quantity: int = Field(..., ge=0, description="Stock disponible")
    low_stock_threshold: int = Field(..., ge=0, description="Umbral de stock bajo")
    weight: Optional[float] = Field(None, ge=0, description="Peso en kg")
    dimensions: Optional[Dimensions] = None
    is_active: bool = True
    is_featured: bool = False
    vendor_id: uuid.UUID = Field(..., description="ID del vendedor")
    category_id: uuid.UUID = Field(..., description="ID de la categoría")
    images: List[ProductImageCreate] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Schema para actualizar producto (solo los campos enviados)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    short_description: Optional[str] = Field(None, min_length=1, max_length=500)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    compare_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    dimensions: Optional[Dimensions] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    vendor_id: Optional[uuid.UUID] = None
    category_id: Optional[uuid.UUID] = None


class StockUpdate(BaseModel):
    """
    Nueva cantidad de stock.
    Los negativos se rechazan en el servicio con BAD_REQUEST.
    """
    quantity: int = Field(..., description="Nueva cantidad")


class ProductFilters(BaseModel):
    """Filtros, orden y paginación del listado de productos"""
    page: int = 1
    limit: int = 20
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    vendor_id: Optional[uuid.UUID] = None
    is_featured: Optional[bool] = None
    is_active: bool = True
    search: Optional[str] = None
    sort: Optional[str] = None
    order: str = "DESC"
