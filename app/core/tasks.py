"""
Tareas automáticas y programadas del sistema.
"""
from apscheduler.schedulers.background import BackgroundScheduler
from core.config import settings
from core.database import SessionLocal
from services.product_service import ProductService
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def report_low_stock_products():
    """
    Registrar en el log los productos activos con stock bajo
    (stock_quantity <= low_stock_threshold).
    """
    db = SessionLocal()
    try:
        products = ProductService(db).check_low_stock()

        if products:
            logger.warning(f"Tarea automática: {len(products)} producto(s) con stock bajo")
            for product in products:
                logger.warning(
                    f"Stock bajo: {product.sku} '{product.name}' "
                    f"({product.stock_quantity}/{product.low_stock_threshold})"
                )
        else:
            logger.debug("Tarea automática: no hay productos con stock bajo.")

    except Exception as e:
        logger.error(f"Error al revisar stock bajo: {str(e)}")
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """
    Iniciar el scheduler de tareas automáticas.
    Se llama al startup de la aplicación.
    """
    if not scheduler.running:
        scheduler.add_job(
            report_low_stock_products,
            'interval',
            hours=settings.LOW_STOCK_CHECK_HOURS,
            id='report_low_stock_products',
            name='Reportar productos con stock bajo',
            replace_existing=True
        )

        scheduler.start()
        logger.info("Scheduler de tareas automáticas iniciado")


def stop_scheduler():
    """
    Detener el scheduler de tareas automáticas.
    Se llama al shutdown de la aplicación.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler de tareas automáticas detenido")
