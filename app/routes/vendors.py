"""
Rutas de vendedores.

- Usuario autenticado: enviar, consultar y editar su propia solicitud
- Admin: revisar solicitudes, aprobar/rechazar, suspender/reactivar, estadísticas
"""
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from core.database import get_db
from core.dependencies import get_current_user, get_current_admin_user
from models.user import User
from models.vendor import VendorStatus
from schemas.vendors import VendorApplicationCreate, VendorApplicationUpdate, VendorApprove, VendorReject
from services.vendor_service import VendorService, serialize_vendor

router = APIRouter(
    prefix="/vendors",
    tags=["vendors"]
)


# ==================== SOLICITUD (USUARIO) ====================

@router.post("/application", status_code=status.HTTP_201_CREATED)
async def submit_application(
    application_data: VendorApplicationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Enviar una solicitud para vender en la plataforma.
    Un usuario solo puede tener una cuenta de vendedor.
    """
    vendor = VendorService(db).submit_application(current_user.id, application_data)

    return {
        "success": True,
        "status_code": 201,
        "message": "Vendor application submitted successfully",
        "data": serialize_vendor(vendor)
    }


@router.get("/application/my")
async def get_my_application(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Consultar la solicitud del usuario autenticado.
    """
    vendor = VendorService(db).get_application_by_user_id(current_user.id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor application retrieved successfully",
        "data": serialize_vendor(vendor)
    }


@router.patch("/application/my")
async def update_my_application(
    application_data: VendorApplicationUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Editar la solicitud mientras siga pendiente.
    """
    vendor = VendorService(db).update_application(current_user.id, application_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor application updated successfully",
        "data": serialize_vendor(vendor)
    }


# ==================== ADMIN ====================

@router.get("/applications/pending")
async def list_pending_applications(
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Solicitudes pendientes, las más antiguas primero.
    """
    vendors = VendorService(db).get_pending_applications()

    return {
        "success": True,
        "status_code": 200,
        "message": "Pending applications retrieved successfully",
        "data": [serialize_vendor(v) for v in vendors]
    }


@router.post("/applications/{vendor_id}/approve")
async def approve_application(
    vendor_id: uuid.UUID,
    approval_data: VendorApprove,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Aprobar una solicitud pendiente. Permite fijar la comisión.
    """
    vendor = VendorService(db).approve_application(vendor_id, approval_data)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor application approved",
        "data": serialize_vendor(vendor)
    }


@router.post("/applications/{vendor_id}/reject")
async def reject_application(
    vendor_id: uuid.UUID,
    rejection_data: VendorReject,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Rechazar una solicitud pendiente. La solicitud se elimina.
    """
    message = VendorService(db).reject_application(vendor_id, rejection_data)

    return {
        "success": True,
        "status_code": 200,
        "message": message,
        "data": None
    }


@router.get("")
async def list_vendors(
    status: Optional[VendorStatus] = Query(None, description="Filtrar por estado"),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Todos los vendedores (más recientes primero) con su cantidad de productos.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Vendors retrieved successfully",
        "data": VendorService(db).get_all_vendors(status)
    }


@router.get("/stats")
async def get_vendor_stats(
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Conteos por estado y porcentaje de vendedores aprobados.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor statistics retrieved successfully",
        "data": VendorService(db).get_vendor_stats()
    }


@router.get("/{vendor_id}")
async def get_vendor(
    vendor_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    vendor = VendorService(db).get_vendor(vendor_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor retrieved successfully",
        "data": serialize_vendor(vendor)
    }


@router.post("/{vendor_id}/suspend")
async def suspend_vendor(
    vendor_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Suspender un vendedor aprobado.
    """
    vendor = VendorService(db).suspend_vendor(vendor_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor suspended",
        "data": serialize_vendor(vendor)
    }


@router.post("/{vendor_id}/reactivate")
async def reactivate_vendor(
    vendor_id: uuid.UUID,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Reactivar un vendedor suspendido.
    """
    vendor = VendorService(db).reactivate_vendor(vendor_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Vendor reactivated",
        "data": serialize_vendor(vendor)
    }
