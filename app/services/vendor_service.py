"""
Flujo de solicitudes de vendedor.

Estados:
    PENDING  --approve-->    APPROVED
    PENDING  --reject-->     (fila eliminada; el usuario debe volver a solicitar)
    APPROVED --suspend-->    SUSPENDED
    SUSPENDED --reactivate--> APPROVED

No hay transición de vuelta a PENDING.
"""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import BadRequestError, ConflictError, NotFoundError
from models.products import Product
from models.vendor import Vendor, VendorStatus
from schemas.vendors import VendorApplicationCreate, VendorApplicationUpdate, VendorApprove, VendorReject

logger = logging.getLogger(__name__)


def serialize_vendor(vendor: Vendor, product_count: Optional[int] = None) -> dict:
    data = {
        "id": str(vendor.id),
        "user_id": str(vendor.user_id),
        "business_name": vendor.business_name,
        "business_type": vendor.business_type.value,
        "tax_id": vendor.tax_id,
        "business_address": vendor.business_address,
        "contact_email": vendor.contact_email,
        "contact_phone": vendor.contact_phone,
        "description": vendor.description,
        "logo": vendor.logo,
        "website": vendor.website,
        "status": vendor.status.value,
        "commission_rate": float(vendor.commission_rate) if vendor.commission_rate is not None else None,
        "payment_info": vendor.payment_info,
        "is_active": vendor.is_active,
        "approved_at": vendor.approved_at.isoformat() if vendor.approved_at else None,
        "created_at": vendor.created_at.isoformat() if vendor.created_at else None,
        "updated_at": vendor.updated_at.isoformat() if vendor.updated_at else None,
    }
    if product_count is not None:
        data["product_count"] = product_count
    return data


class VendorService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== HELPERS ====================

    def _get_or_404(self, vendor_id: uuid.UUID, message: str = "Vendor not found") -> Vendor:
        vendor = self.db.query(Vendor).filter(Vendor.id == vendor_id).first()
        if not vendor:
            raise NotFoundError(message, "VENDOR_NOT_FOUND")
        return vendor

    def _require_status(self, vendor: Vendor, expected: VendorStatus, message: str) -> None:
        if vendor.status != expected:
            logger.warning(
                f"Transición rechazada para vendor {vendor.id}: estado actual {vendor.status.value}, "
                f"se requiere {expected.value}"
            )
            raise BadRequestError(message, "INVALID_VENDOR_STATUS")

    def _product_counts(self, vendor_ids: List[uuid.UUID]) -> dict:
        if not vendor_ids:
            return {}
        rows = self.db.query(Product.vendor_id, func.count(Product.id)).filter(
            Product.vendor_id.in_(vendor_ids)
        ).group_by(Product.vendor_id).all()
        return {vendor_id: count for vendor_id, count in rows}

    # ==================== SOLICITUD (USUARIO) ====================

    def submit_application(self, user_id: uuid.UUID, data: VendorApplicationCreate) -> Vendor:
        if self.db.query(Vendor.id).filter(Vendor.user_id == user_id).first():
            raise ConflictError("User already has a vendor account", "VENDOR_ALREADY_EXISTS")

        vendor = Vendor(
            user_id=user_id,
            business_name=data.business_name,
            business_type=data.business_type,
            tax_id=data.tax_id,
            business_address=data.business_address.model_dump(),
            contact_email=data.contact_email,
            contact_phone=data.contact_phone,
            description=data.description,
            logo=data.logo,
            website=data.website,
            commission_rate=Decimal(str(data.commission_rate)),
            payment_info=data.payment_info.model_dump(),
            status=VendorStatus.PENDING,
            is_active=False  # No activo hasta ser aprobado
        )
        self.db.add(vendor)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User already has a vendor account", "VENDOR_ALREADY_EXISTS")
        self.db.refresh(vendor)

        logger.info(f"Solicitud de vendedor enviada: {vendor.id} (usuario {user_id})")
        return vendor

    def get_application_by_user_id(self, user_id: uuid.UUID) -> Vendor:
        vendor = self.db.query(Vendor).filter(Vendor.user_id == user_id).first()
        if not vendor:
            raise NotFoundError("Vendor application not found", "VENDOR_APPLICATION_NOT_FOUND")
        return vendor

    def update_application(self, user_id: uuid.UUID, data: VendorApplicationUpdate) -> Vendor:
        vendor = self.get_application_by_user_id(user_id)
        self._require_status(vendor, VendorStatus.PENDING, "Cannot update application after review")

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in ("tax_id", "description", "logo", "website"):
                continue
            if field == "commission_rate":
                value = Decimal(str(value))
            setattr(vendor, field, value)

        self.db.commit()
        self.db.refresh(vendor)
        return vendor

    # ==================== ADMINISTRACIÓN ====================

    def get_pending_applications(self) -> List[Vendor]:
        return self.db.query(Vendor).filter(
            Vendor.status == VendorStatus.PENDING
        ).order_by(Vendor.created_at.asc()).all()

    def approve_application(self, vendor_id: uuid.UUID, data: VendorApprove) -> Vendor:
        vendor = self._get_or_404(vendor_id, "Vendor application not found")
        self._require_status(vendor, VendorStatus.PENDING, "Can only approve pending applications")

        vendor.status = VendorStatus.APPROVED
        vendor.is_active = True
        vendor.approved_at = datetime.now(timezone.utc)
        # 0 es una comisión válida
        if data.commission_rate is not None:
            vendor.commission_rate = Decimal(str(data.commission_rate))

        self.db.commit()
        self.db.refresh(vendor)

        logger.info(f"Vendedor aprobado: {vendor.id} (comisión {vendor.commission_rate})")
        if data.admin_notes:
            logger.info(f"Notas del admin para {vendor.id}: {data.admin_notes}")
        return vendor

    def reject_application(self, vendor_id: uuid.UUID, data: VendorReject) -> str:
        """
        Rechazar una solicitud pendiente.
        La fila se elimina: el usuario puede enviar una nueva solicitud desde cero.
        """
        vendor = self._get_or_404(vendor_id, "Vendor application not found")
        self._require_status(vendor, VendorStatus.PENDING, "Can only reject pending applications")

        self.db.delete(vendor)
        self.db.commit()

        logger.info(f"Solicitud de vendedor rechazada y eliminada: {vendor_id}. Motivo: {data.reason}")
        return f"Vendor application rejected. Reason: {data.reason}"

    def suspend_vendor(self, vendor_id: uuid.UUID) -> Vendor:
        vendor = self._get_or_404(vendor_id)
        self._require_status(vendor, VendorStatus.APPROVED, "Can only suspend approved vendors")

        vendor.status = VendorStatus.SUSPENDED
        vendor.is_active = False
        self.db.commit()
        self.db.refresh(vendor)

        logger.info(f"Vendedor suspendido: {vendor.id}")
        return vendor

    def reactivate_vendor(self, vendor_id: uuid.UUID) -> Vendor:
        vendor = self._get_or_404(vendor_id)
        self._require_status(vendor, VendorStatus.SUSPENDED, "Can only reactivate suspended vendors")

        vendor.status = VendorStatus.APPROVED
        vendor.is_active = True
        self.db.commit()
        self.db.refresh(vendor)

        logger.info(f"Vendedor reactivado: {vendor.id}")
        return vendor

    def get_all_vendors(self, status: Optional[VendorStatus] = None) -> List[dict]:
        query = self.db.query(Vendor)
        if status:
            query = query.filter(Vendor.status == status)

        vendors = query.order_by(Vendor.created_at.desc()).all()
        counts = self._product_counts([v.id for v in vendors])

        return [serialize_vendor(v, counts.get(v.id, 0)) for v in vendors]

    def get_vendor(self, vendor_id: uuid.UUID) -> Vendor:
        return self._get_or_404(vendor_id)

    def get_vendor_stats(self) -> dict:
        rows = self.db.query(Vendor.status, func.count(Vendor.id)).group_by(Vendor.status).all()
        by_status = {status: count for status, count in rows}

        total = sum(by_status.values())
        approved = by_status.get(VendorStatus.APPROVED, 0)

        return {
            "total": total,
            "pending": by_status.get(VendorStatus.PENDING, 0),
            "approved": approved,
            "suspended": by_status.get(VendorStatus.SUSPENDED, 0),
            "active_percentage": round(approved / total * 100, 2) if total else 0,
        }
