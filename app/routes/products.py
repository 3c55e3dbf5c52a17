"""
Rutas del catálogo de productos.

Lectura: pública.
Escritura: solo administradores.
"""
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from core.database import get_db
from core.dependencies import get_current_admin_user
from models.user import User
from schemas.products import ProductCreate, ProductUpdate, StockUpdate, ProductFilters
from services.product_service import ProductService, serialize_product

router = APIRouter(
    prefix="/products",
    tags=["products"]
)


# ==================== PÚBLICAS ====================

@router.get("")
async def list_products(
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(20, ge=1, le=100, description="Items por página"),
    category: Optional[str] = Query(None, description="Nombre (parcial) o ID de categoría"),
    min_price: Optional[float] = Query(None, ge=0, description="Precio mínimo"),
    max_price: Optional[float] = Query(None, ge=0, description="Precio máximo"),
    in_stock: Optional[bool] = Query(None, description="true: con stock, false: agotados"),
    vendor_id: Optional[uuid.UUID] = Query(None, description="Filtrar por vendedor"),
    is_featured: Optional[bool] = Query(None, description="Solo destacados"),
    is_active: bool = Query(True, description="Filtrar por estado activo/inactivo"),
    search: Optional[str] = Query(None, description="Buscar en nombre, descripción o SKU"),
    sort: Optional[str] = Query(None, description="price, created_at, name, stock_quantity, is_featured"),
    order: str = Query("DESC", description="ASC o DESC"),
    db: Session = Depends(get_db)
):
    """
    Listar productos con filtros, orden y paginación.

    Un valor de **sort** no reconocido ordena por created_at.
    """
    filters = ProductFilters(
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        vendor_id=vendor_id,
        is_featured=is_featured,
        is_active=is_active,
        search=search,
        sort=sort,
        order=order
    )

    return {
        "success": True,
        "status_code": 200,
        "message": "Products retrieved successfully",
        "data": ProductService(db).find_all(filters)
    }


@router.get("/featured")
async def list_featured_products(
    limit: int = Query(10, ge=1, le=100, description="Cantidad máxima"),
    db: Session = Depends(get_db)
):
    """
    Productos destacados activos, más recientes primero.
    """
    products = ProductService(db).find_featured(limit)

    return {
        "success": True,
        "status_code": 200,
        "message": "Featured products retrieved successfully",
        "data": [serialize_product(p) for p in products]
    }


@router.get("/vendor/{vendor_id}")
async def list_vendor_products(
    vendor_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    Productos activos de un vendedor.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor products retrieved successfully",
        "data": ProductService(db).find_by_vendor(vendor_id, page, limit)
    }


@router.get("/category/{category_id}")
async def list_category_products(
    category_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    Productos activos de una categoría.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Category products retrieved successfully",
        "data": ProductService(db).find_by_category(category_id, page, limit)
    }


@router.get("/slug/{slug}")
async def get_product_by_slug(
    slug: str,
    db: Session = Depends(get_db)
):
    """
    Obtener un producto activo por slug.
    """
    product = ProductService(db).find_by_slug(slug)

    return {
        "success": True,
        "status_code": 200,
        "message": "Product retrieved successfully",
        "data": serialize_product(product)
    }


# ==================== ADMIN ====================

@router.get("/admin/low-stock")
async def list_low_stock_products(
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Productos activos con stock en o por debajo de su umbral.
    """
    products = ProductService(db).check_low_stock()

    return {
        "success": True,
        "status_code": 200,
        "message": "Low stock products retrieved successfully",
        "data": [serialize_product(p) for p in products]
    }


@router.get("/{product_id}")
async def get_product(
    product_id: uuid.UUID,
    db: Session = Depends(get_db)
):
    """
    Obtener un producto por ID (activo o no).
    """
    product = ProductService(db).find_one(product_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Product retrieved successfully",
        "data": serialize_product(product)
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Crear un producto (solo administradores).

    - SKU y slug únicos
    - compare_price, si se envía, debe ser mayor que price
    """
    product = ProductService(db).create(product_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Product created successfully",
        "data": serialize_product(product)
    }


@router.patch("/{product_id}")
async def update_product(
    product_id: uuid.UUID,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Actualizar un producto (solo administradores).
    Solo se modifican los campos enviados.
    """
    product = ProductService(db).update(product_id, product_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Product updated successfully",
        "data": serialize_product(product)
    }


@router.patch("/{product_id}/stock")
async def update_product_stock(
    product_id: uuid.UUID,
    stock_data: StockUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Fijar el stock de un producto (solo administradores).
    """
    product = ProductService(db).update_stock(product_id, stock_data.quantity)

    return {
        "success": True,
        "status_code": 200,
        "message": "Stock updated successfully",
        "data": serialize_product(product)
    }


@router.delete("/{product_id}")
async def deactivate_product(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Desactivar un producto (borrado lógico, solo administradores).
    """
    product = ProductService(db).remove(product_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Product deactivated successfully",
        "data": serialize_product(product)
    }


@router.delete("/{product_id}/permanent")
async def delete_product(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Eliminar un producto permanentemente (solo administradores).
    """
    ProductService(db).delete(product_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Product deleted permanently",
        "data": None
    }
