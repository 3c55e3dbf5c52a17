from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, Text, Uuid, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import enum
import uuid


# Estados de la solicitud / cuenta de vendedor
class VendorStatus(str, enum.Enum):
    PENDING = "pending"       # Solicitud enviada, esperando revisión
    APPROVED = "approved"     # Puede vender
    SUSPENDED = "suspended"   # Suspendido por un admin


class BusinessType(str, enum.Enum):
    INDIVIDUAL = "individual"
    CORPORATION = "corporation"
    LLC = "llc"
    PARTNERSHIP = "partnership"
    SOLE_PROPRIETORSHIP = "sole_proprietorship"


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # Datos del negocio
    business_name = Column(String(255), nullable=False)
    business_type = Column(SQLEnum(BusinessType), nullable=False)
    tax_id = Column(String(50), nullable=True)
    business_address = Column(JSON, nullable=False)  # {"street", "city", "state", "zip_code", "country"}
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    logo = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)

    # Estado y comisión
    status = Column(SQLEnum(VendorStatus), nullable=False, default=VendorStatus.PENDING, index=True)
    commission_rate = Column(Numeric(5, 2), nullable=False)
    payment_info = Column(JSON, nullable=False)  # {"account_type", "account_number", "routing_number", "account_holder"}
    is_active = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)

    # Relaciones
    user = relationship("User", back_populates="vendor")
    products = relationship("Product", back_populates="vendor", cascade="all, delete-orphan")
