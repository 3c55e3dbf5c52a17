"""
Script para poblar la base de datos con datos de ejemplo.

Crea el usuario administrador (el registro público no permite rol admin)
y un árbol de categorías de ejemplo. Es idempotente.

Variables de entorno:
    ADMIN_EMAIL     (default: admin@marketplace.com)
    ADMIN_PASSWORD  (default: Admin12345)
"""
import os
from core.database import SessionLocal
from core.security import hash_password
from models import User, UserRole, Category

# nombre, slug, orden, hijos
SAMPLE_TREE = [
    ("Electronics", "electronics", 0, [
        ("Computers", "computers", 0, [
            ("Laptops", "laptops", 0, []),
            ("Desktops", "desktops", 1, []),
        ]),
        ("Phones", "phones", 1, []),
    ]),
    ("Home & Garden", "home-garden", 1, [
        ("Kitchen", "kitchen", 0, []),
        ("Furniture", "furniture", 1, []),
    ]),
    ("Books", "books", 2, []),
]


def seed_admin(db) -> None:
    email = os.getenv("ADMIN_EMAIL", "admin@marketplace.com").strip().lower()

    if db.query(User).filter(User.email == email).first():
        print(f"El admin {email} ya existe")
        return

    db.add(User(
        email=email,
        hashed_password=hash_password(os.getenv("ADMIN_PASSWORD", "Admin12345")),
        first_name="Admin",
        last_name="Marketplace",
        role=UserRole.ADMIN,
        is_active=True
    ))
    db.commit()
    print(f"Admin creado: {email}")


def seed_categories(db, nodes, parent=None) -> None:
    for name, slug, sort_order, children in nodes:
        category = db.query(Category).filter(Category.slug == slug).first()
        if not category:
            category = Category(
                name=name,
                slug=slug,
                sort_order=sort_order,
                parent_id=parent.id if parent else None,
                is_active=True
            )
            db.add(category)
            db.flush()
        seed_categories(db, children, category)


def seed_data():
    db = SessionLocal()

    try:
        print("Poblando base de datos...")
        seed_admin(db)
        seed_categories(db, SAMPLE_TREE)
        db.commit()
        print("Categorías de ejemplo creadas")
    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_data()
