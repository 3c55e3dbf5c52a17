"""
Schemas para solicitudes y cuentas de vendedor.
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from models.vendor import BusinessType
from schemas.auth import validate_phone


class BusinessAddress(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class PaymentInfo(BaseModel):
    account_type: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    routing_number: Optional[str] = None
    account_holder: str = Field(..., min_length=1)


class VendorApplicationCreate(BaseModel):
    """Schema para enviar una solicitud de vendedor"""
    business_name: str = Field(..., min_length=1, max_length=255, description="Razón social")
    business_type: BusinessType
    tax_id: Optional[str] = Field(None, max_length=50)
    business_address: BusinessAddress
    contact_email: EmailStr = Field(..., description="Email de contacto")
    contact_phone: str = Field(..., max_length=20, description="Teléfono de contacto")
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=255)
    commission_rate: float = Field(..., ge=0, le=100, description="Comisión en porcentaje")
    payment_info: PaymentInfo

    @validator('contact_phone')
    def check_contact_phone(cls, v):
        return validate_phone(v)


class VendorApplicationUpdate(BaseModel):
    """Schema para editar una solicitud pendiente"""
    business_name: Optional[str] = Field(None, min_length=1, max_length=255)
    business_type: Optional[BusinessType] = None
    tax_id: Optional[str] = Field(None, max_length=50)
    business_address: Optional[BusinessAddress] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=255)
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    payment_info: Optional[PaymentInfo] = None

    @validator('contact_phone')
    def check_contact_phone(cls, v):
        return validate_phone(v)


class VendorApprove(BaseModel):
    """Aprobación (admin): comisión opcional, 0 es un valor válido"""
    commission_rate: Optional[float] = Field(None, ge=0, le=50)
    admin_notes: Optional[str] = Field(None, max_length=500)


class VendorReject(BaseModel):
    """Rechazo (admin): motivo obligatorio"""
    reason: str = Field(..., min_length=10, max_length=500)
