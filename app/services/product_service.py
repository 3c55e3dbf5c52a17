"""
Catálogo de productos.

Invariante: si compare_price está definido debe ser estrictamente mayor
que price (se revalida con los valores efectivos en cada actualización).
"""
import logging
import uuid
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from core.exceptions import BadRequestError, ConflictError, NotFoundError
from core.pagination import build_pagination, get_offset
from models.categories import Category
from models.products import Product, ProductImage
from models.vendor import Vendor
from schemas.products import ProductCreate, ProductUpdate, ProductFilters

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

# Campos permitidos para ordenar (se aceptan también en camelCase)
SORT_FIELDS = {
    "price": Product.price,
    "created_at": Product.created_at,
    "createdAt": Product.created_at,
    "name": Product.name,
    "stock_quantity": Product.stock_quantity,
    "stockQuantity": Product.stock_quantity,
    "is_featured": Product.is_featured,
    "isFeatured": Product.is_featured,
}

MONEY_FIELDS = ("price", "compare_price", "cost_price", "weight")
NULLABLE_FIELDS = ("compare_price", "cost_price", "weight", "dimensions")


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_product(product: Product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "short_description": product.short_description,
        "sku": product.sku,
        "price": _to_float(product.price),
        "compare_price": _to_float(product.compare_price),
        "cost_price": _to_float(product.cost_price),
        "stock_quantity": product.stock_quantity,
        "low_stock_threshold": product.low_stock_threshold,
        "is_low_stock": product.is_low_stock,
        "weight": _to_float(product.weight),
        "dimensions": product.dimensions,
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "vendor_id": str(product.vendor_id),
        "category_id": str(product.category_id),
        "vendor": {
            "id": str(product.vendor.id),
            "business_name": product.vendor.business_name,
        } if product.vendor else None,
        "category": {
            "id": str(product.category.id),
            "name": product.category.name,
            "slug": product.category.slug,
        } if product.category else None,
        "images": [
            {
                "id": str(image.id),
                "image_url": image.image_url,
                "alt_text": image.alt_text,
                "sort_order": image.sort_order,
                "is_primary": image.is_primary,
            }
            for image in product.images
        ],
        "created_at": product.created_at.isoformat() if product.created_at else None,
        "updated_at": product.updated_at.isoformat() if product.updated_at else None,
    }


def contains_pattern(value: str) -> str:
    """Patrón ILIKE "contiene" con % y _ tomados literalmente (escape \\)"""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def validate_compare_price(price, compare_price) -> None:
    if compare_price is not None and _to_decimal(compare_price) <= _to_decimal(price):
        raise BadRequestError("Compare price must be higher than selling price", "INVALID_COMPARE_PRICE")


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== HELPERS ====================

    def _base_query(self):
        return self.db.query(Product).options(
            selectinload(Product.images),
            selectinload(Product.category),
            selectinload(Product.vendor),
        )

    def _get_or_404(self, product_id: uuid.UUID) -> Product:
        product = self._base_query().filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found", "PRODUCT_NOT_FOUND")
        return product

    def _check_unique(self, sku: Optional[str], slug: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
        if sku is not None:
            query = self.db.query(Product.id).filter(Product.sku == sku)
            if exclude_id:
                query = query.filter(Product.id != exclude_id)
            if query.first():
                raise ConflictError("Product with this SKU already exists", "DUPLICATE_SKU")

        if slug is not None:
            query = self.db.query(Product.id).filter(Product.slug == slug)
            if exclude_id:
                query = query.filter(Product.id != exclude_id)
            if query.first():
                raise ConflictError("Product with this slug already exists", "DUPLICATE_SLUG")

    def _check_references(self, vendor_id: Optional[uuid.UUID], category_id: Optional[uuid.UUID]) -> None:
        if vendor_id is not None and not self.db.query(Vendor.id).filter(Vendor.id == vendor_id).first():
            raise NotFoundError("Vendor not found", "VENDOR_NOT_FOUND")

        if category_id is not None and not self.db.query(Category.id).filter(Category.id == category_id).first():
            raise NotFoundError("Category not found", "CATEGORY_NOT_FOUND")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Product with this SKU or slug already exists")

    def _paginate(self, query, page: int, limit: int) -> dict:
        total = query.count()
        products = query.offset(get_offset(page, limit)).limit(limit).all()
        return {
            "products": [serialize_product(p) for p in products],
            "pagination": build_pagination(page, limit, total),
        }

    # ==================== ESCRITURA ====================

    def create(self, data: ProductCreate) -> Product:
        self._check_unique(data.sku, data.slug)
        validate_compare_price(data.price, data.compare_price)
        self._check_references(data.vendor_id, data.category_id)

        product = Product(
            name=data.name,
            slug=data.slug,
            description=data.description,
            short_description=data.short_description,
            sku=data.sku,
            price=_to_decimal(data.price),
            compare_price=_to_decimal(data.compare_price),
            cost_price=_to_decimal(data.cost_price),
            stock_quantity=data.stock_quantity,
            low_stock_threshold=data.low_stock_threshold,
            weight=_to_decimal(data.weight),
            dimensions=data.dimensions.model_dump(exclude_none=True) if data.dimensions else None,
            is_active=data.is_active,
            is_featured=data.is_featured,
            vendor_id=data.vendor_id,
            category_id=data.category_id,
            images=[
                ProductImage(
                    image_url=image.image_url,
                    alt_text=image.alt_text,
                    sort_order=image.sort_order,
                    is_primary=image.is_primary
                )
                for image in data.images
            ]
        )
        self.db.add(product)
        self._commit()

        logger.info(f"Producto creado: {product.sku} ({product.id})")
        return self._get_or_404(product.id)

    def update(self, product_id: uuid.UUID, data: ProductUpdate) -> Product:
        product = self._get_or_404(product_id)
        update_data = data.model_dump(exclude_unset=True)

        self._check_unique(update_data.get("sku"), update_data.get("slug"), exclude_id=product.id)

        # Revalidar con los valores efectivos (lo enviado o lo ya guardado)
        effective_price = update_data.get("price") if update_data.get("price") is not None else product.price
        effective_compare = update_data["compare_price"] if "compare_price" in update_data else product.compare_price
        validate_compare_price(effective_price, effective_compare)

        self._check_references(update_data.get("vendor_id"), update_data.get("category_id"))

        for field, value in update_data.items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            if field in MONEY_FIELDS:
                value = _to_decimal(value)
            setattr(product, field, value)

        self._commit()

        logger.info(f"Producto actualizado: {product.sku} ({product.id})")
        return self._get_or_404(product_id)

    def update_stock(self, product_id: uuid.UUID, quantity: int) -> Product:
        if quantity < 0:
            raise BadRequestError("Stock quantity cannot be negative", "INVALID_STOCK")

        product = self._get_or_404(product_id)
        previous = product.stock_quantity
        product.stock_quantity = quantity
        self.db.commit()

        logger.info(f"Stock actualizado: {product.sku} {previous} -> {quantity}")
        return self._get_or_404(product_id)

    def remove(self, product_id: uuid.UUID) -> Product:
        """Borrado lógico: el producto deja de listarse pero se conserva"""
        product = self._get_or_404(product_id)
        product.is_active = False
        self.db.commit()

        logger.info(f"Producto desactivado: {product.sku} ({product.id})")
        return self._get_or_404(product_id)

    def delete(self, product_id: uuid.UUID) -> None:
        """Borrado físico: el producto y sus imágenes"""
        product = self._get_or_404(product_id)
        sku = product.sku
        self.db.delete(product)
        self.db.commit()

        logger.info(f"Producto eliminado permanentemente: {sku} ({product_id})")

    # ==================== LECTURA ====================

    def find_all(self, filters: ProductFilters) -> dict:
        """
        Listado con filtros dinámicos, orden y paginación.

        - category: substring del nombre (sin distinguir mayúsculas) o ID exacto
        - in_stock: True -> stock > 0, False -> stock == 0
        - search: substring en nombre, descripción o SKU
        - sort: campo permitido; cualquier otro valor ordena por created_at
        """
        page = max(filters.page, 1)
        limit = min(max(filters.limit, 1), MAX_PAGE_SIZE)

        query = self._base_query().filter(Product.is_active == filters.is_active)

        if filters.category:
            query = query.join(Product.category)
            category_filter = Category.name.ilike(contains_pattern(filters.category), escape="\\")
            try:
                category_id = uuid.UUID(filters.category)
                category_filter = or_(category_filter, Product.category_id == category_id)
            except ValueError:
                pass
            query = query.filter(category_filter)

        if filters.min_price is not None:
            query = query.filter(Product.price >= _to_decimal(filters.min_price))

        if filters.max_price is not None:
            query = query.filter(Product.price <= _to_decimal(filters.max_price))

        if filters.in_stock is True:
            query = query.filter(Product.stock_quantity > 0)
        elif filters.in_stock is False:
            query = query.filter(Product.stock_quantity == 0)

        if filters.vendor_id:
            query = query.filter(Product.vendor_id == filters.vendor_id)

        if filters.is_featured is not None:
            query = query.filter(Product.is_featured == filters.is_featured)

        if filters.search:
            pattern = contains_pattern(filters.search)
            query = query.filter(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                    Product.sku.ilike(pattern, escape="\\")
                )
            )

        sort_column = SORT_FIELDS.get(filters.sort or "", Product.created_at)
        if (filters.order or "").upper() == "ASC":
            query = query.order_by(sort_column.asc())
        else:
            query = query.order_by(sort_column.desc())

        if sort_column is not Product.created_at:
            query = query.order_by(Product.created_at.desc())

        return self._paginate(query.order_by(Product.id), page, limit)

    def find_featured(self, limit: int = 10) -> List[Product]:
        return self._base_query().filter(
            Product.is_active == True,
            Product.is_featured == True
        ).order_by(Product.created_at.desc()).limit(limit).all()

    def find_by_vendor(self, vendor_id: uuid.UUID, page: int = 1, limit: int = 20) -> dict:
        query = self._base_query().filter(
            Product.vendor_id == vendor_id,
            Product.is_active == True
        ).order_by(Product.created_at.desc(), Product.id)
        return self._paginate(query, page, limit)

    def find_by_category(self, category_id: uuid.UUID, page: int = 1, limit: int = 20) -> dict:
        query = self._base_query().filter(
            Product.category_id == category_id,
            Product.is_active == True
        ).order_by(Product.created_at.desc(), Product.id)
        return self._paginate(query, page, limit)

    def find_one(self, product_id: uuid.UUID) -> Product:
        """Por ID, activo o no"""
        return self._get_or_404(product_id)

    def find_by_slug(self, slug: str) -> Product:
        product = self._base_query().filter(
            Product.slug == slug,
            Product.is_active == True
        ).first()
        if not product:
            raise NotFoundError("Product not found", "PRODUCT_NOT_FOUND")
        return product

    def check_low_stock(self) -> List[Product]:
        return self._base_query().filter(
            Product.is_active == True,
            Product.stock_quantity <= Product.low_stock_threshold
        ).order_by(Product.stock_quantity.asc()).all()
