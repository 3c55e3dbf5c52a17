from .auth import (
    UserRegister,
    UserLogin,
)
from .users import UserUpdateProfile
from .categories import CategoryCreate, CategoryUpdate
from .products import ProductCreate, ProductUpdate, StockUpdate, ProductFilters
from .vendors import (
    VendorApplicationCreate,
    VendorApplicationUpdate,
    VendorApprove,
    VendorReject,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserUpdateProfile",
    "CategoryCreate",
    "CategoryUpdate",
    "ProductCreate",
    "ProductUpdate",
    "StockUpdate",
    "ProductFilters",
    "VendorApplicationCreate",
    "VendorApplicationUpdate",
    "VendorApprove",
    "VendorReject",
]
