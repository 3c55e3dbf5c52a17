"""
Árbol de categorías.

Las categorías forman un árbol (parent_id auto-referenciado, sin ciclos).
Borrar una categoría borra todo su subárbol.
"""
import logging
import uuid
from collections import defaultdict
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import BadRequestError, ConflictError, NotFoundError
from core.pagination import build_pagination, get_offset
from models.categories import Category
from models.products import Product
from schemas.categories import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def category_summary(category: Category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
    }


def serialize_category(category: Category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image_url": category.image_url,
        "parent_id": str(category.parent_id) if category.parent_id else None,
        "is_active": category.is_active,
        "sort_order": category.sort_order,
        "is_root": category.is_root,
        "created_at": category.created_at.isoformat() if category.created_at else None,
        "updated_at": category.updated_at.isoformat() if category.updated_at else None,
    }


def _sort_key(category: Category):
    return (category.sort_order, category.name)


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== HELPERS ====================

    def _get_or_404(self, category_id: uuid.UUID) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError(f"Category with ID {category_id} not found", "CATEGORY_NOT_FOUND")
        return category

    def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
        if name is not None:
            query = self.db.query(Category).filter(Category.name == name)
            if exclude_id:
                query = query.filter(Category.id != exclude_id)
            if query.first():
                raise ConflictError(f"Category with name '{name}' already exists", "DUPLICATE_NAME")

        if slug is not None:
            query = self.db.query(Category).filter(Category.slug == slug)
            if exclude_id:
                query = query.filter(Category.id != exclude_id)
            if query.first():
                raise ConflictError(f"Category with slug '{slug}' already exists", "DUPLICATE_SLUG")

    def _preload_all(self) -> Dict[uuid.UUID, Category]:
        """Todas las categorías indexadas por id (una sola consulta)"""
        return {c.id: c for c in self.db.query(Category).all()}

    def _ancestry(self, category: Category, by_id: Dict[uuid.UUID, Category]) -> List[Category]:
        """Cadena raíz -> categoría siguiendo parent_id"""
        chain = []
        seen = set()
        node = category
        while node is not None and node.id not in seen:
            seen.add(node.id)
            chain.append(node)
            node = by_id.get(node.parent_id)
        return list(reversed(chain))

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Category with this name or slug already exists")

    def _active_children(self, category: Category) -> List[Category]:
        return self.db.query(Category).filter(
            Category.parent_id == category.id,
            Category.is_active == True
        ).order_by(Category.sort_order.asc(), Category.name.asc()).all()

    # ==================== LECTURA ====================

    def find_all(self, page: int = 1, limit: int = 10) -> dict:
        query = self.db.query(Category).filter(Category.is_active == True)
        total = query.count()

        categories = query.order_by(
            Category.sort_order.asc(), Category.name.asc()
        ).offset(get_offset(page, limit)).limit(limit).all()

        return {
            "categories": [serialize_category(c) for c in categories],
            "pagination": build_pagination(page, limit, total),
        }

    def get_tree(self) -> List[dict]:
        """
        Árbol completo de categorías activas.

        Una sola consulta; el agrupado por padre se hace en memoria.
        Los hijos de una categoría inactiva no aparecen.
        """
        categories = self.db.query(Category).filter(Category.is_active == True).all()

        by_parent: Dict[Optional[uuid.UUID], List[Category]] = defaultdict(list)
        for category in categories:
            by_parent[category.parent_id].append(category)
        for siblings in by_parent.values():
            siblings.sort(key=_sort_key)

        visited = set()

        def build(node: Category) -> dict:
            visited.add(node.id)
            children = [
                build(child)
                for child in by_parent.get(node.id, [])
                if child.id not in visited
            ]
            data = serialize_category(node)
            data["is_leaf"] = not children
            data["children"] = children
            return data

        return [build(root) for root in by_parent.get(None, []) if root.id not in visited]

    def get_hierarchy_path(self, category: Category, by_id: Optional[Dict[uuid.UUID, Category]] = None) -> str:
        """Ruta desde la raíz, con el mismo formato que Category.get_hierarchy_path"""
        chain = self._ancestry(category, by_id if by_id is not None else self._preload_all())
        return " > ".join(node.name for node in chain)

    def get_breadcrumbs(self, category: Category, by_id: Optional[Dict[uuid.UUID, Category]] = None) -> List[dict]:
        chain = self._ancestry(category, by_id if by_id is not None else self._preload_all())
        return [category_summary(node) for node in chain]

    def find_by_slug(self, slug: str) -> dict:
        category = self.db.query(Category).filter(
            Category.slug == slug,
            Category.is_active == True
        ).first()

        if not category:
            raise NotFoundError(f"Category with slug '{slug}' not found", "CATEGORY_NOT_FOUND")

        by_id = self._preload_all()
        hierarchy_path = self.get_hierarchy_path(category, by_id)

        data = serialize_category(category)
        parent = by_id.get(category.parent_id)
        data["parent"] = category_summary(parent) if parent else None
        data["children"] = [serialize_category(c) for c in self._active_children(category)]
        data["breadcrumbs"] = self.get_breadcrumbs(category, by_id)
        data["hierarchy_path"] = hierarchy_path
        return data

    def find_one_by_id(self, category_id: uuid.UUID) -> dict:
        category = self._get_or_404(category_id)

        data = serialize_category(category)
        data["parent"] = category_summary(category.parent) if category.parent else None
        data["children"] = [
            serialize_category(c) for c in sorted(category.children, key=_sort_key)
        ]
        data["is_leaf"] = category.is_leaf
        return data

    def get_children(self, category_id: uuid.UUID) -> dict:
        category = self._get_or_404(category_id)

        return {
            "parent": category_summary(category),
            "children": [serialize_category(c) for c in self._active_children(category)],
        }

    # ==================== ESCRITURA ====================

    def create(self, data: CategoryCreate) -> Category:
        self._check_unique(data.name, data.slug)

        if data.parent_id is not None:
            parent = self.db.query(Category).filter(Category.id == data.parent_id).first()
            if not parent:
                raise NotFoundError(f"Parent category with ID {data.parent_id} not found", "PARENT_NOT_FOUND")

        category = Category(
            name=data.name,
            slug=data.slug,
            description=data.description,
            image_url=data.image_url,
            parent_id=data.parent_id,
            sort_order=data.sort_order,
            is_active=True
        )
        self.db.add(category)
        self._commit()
        self.db.refresh(category)

        logger.info(f"Categoría creada: {category.slug} ({category.id})")
        return category

    def update(self, category_id: uuid.UUID, data: CategoryUpdate) -> Category:
        category = self._get_or_404(category_id)
        update_data = data.model_dump(exclude_unset=True)

        self._check_unique(update_data.get("name"), update_data.get("slug"), exclude_id=category.id)

        if "parent_id" in update_data and update_data["parent_id"] is not None:
            self._validate_new_parent(category, update_data["parent_id"])

        for field, value in update_data.items():
            if value is None and field not in ("parent_id", "description", "image_url"):
                continue
            setattr(category, field, value)

        self._commit()
        self.db.refresh(category)

        logger.info(f"Categoría actualizada: {category.slug} ({category.id})")
        return category

    def _validate_new_parent(self, category: Category, parent_id: uuid.UUID) -> None:
        """El nuevo padre debe existir y no puede ser la categoría ni un descendiente"""
        if parent_id == category.id:
            raise BadRequestError("A category cannot be its own parent", "INVALID_PARENT")

        parent = self.db.query(Category).filter(Category.id == parent_id).first()
        if not parent:
            raise NotFoundError(f"Parent category with ID {parent_id} not found", "PARENT_NOT_FOUND")

        if any(node.id == category.id for node in self._ancestry(parent, self._preload_all())):
            raise BadRequestError(
                "Cannot move a category under one of its descendants",
                "INVALID_PARENT"
            )

    def _subtree_ids(self, category: Category) -> List[uuid.UUID]:
        by_parent: Dict[Optional[uuid.UUID], List[uuid.UUID]] = defaultdict(list)
        for row in self._preload_all().values():
            by_parent[row.parent_id].append(row.id)

        ids = []
        pending = [category.id]
        while pending:
            current = pending.pop()
            if current in ids:
                continue
            ids.append(current)
            pending.extend(by_parent.get(current, []))
        return ids

    def delete(self, category_id: uuid.UUID) -> None:
        """
        Borrar la categoría y todo su subárbol.
        No se permite si algún producto usa alguna categoría del subárbol.
        """
        category = self._get_or_404(category_id)
        subtree_ids = self._subtree_ids(category)

        product_count = self.db.query(func.count(Product.id)).filter(
            Product.category_id.in_(subtree_ids)
        ).scalar()

        if product_count:
            logger.warning(
                f"Borrado rechazado: la categoría {category.slug} tiene {product_count} producto(s) en su subárbol"
            )
            raise BadRequestError(
                "Cannot delete a category whose subtree still has products",
                "CATEGORY_HAS_PRODUCTS"
            )

        slug = category.slug
        self.db.delete(category)
        self.db.commit()

        logger.info(f"Categoría eliminada con su subárbol: {slug} ({len(subtree_ids)} categoría(s))")
