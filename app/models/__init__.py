from .user import User, UserRole
from .categories import Category
from .products import Product, ProductImage
from .vendor import Vendor, VendorStatus, BusinessType

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Product",
    "ProductImage",
    "Vendor",
    "VendorStatus",
    "BusinessType",
]
