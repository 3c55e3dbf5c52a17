from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from contextlib import asynccontextmanager
import logging
import time
from core.config import settings
from core.logging_config import setup_logging
from core.exceptions import AppException
from core.csrf_protection import CSRFMiddleware

# Rutas de endpoints importadas
from routes.auth import router as auth_router
from routes.user import router as user_router
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.vendors import router as vendors_router

# Tareas automáticas
from core.tasks import start_scheduler, stop_scheduler

setup_logging()
logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")

docs_url = "/docs" if settings.ENV == "development" else None
redoc_url = "/redoc" if settings.ENV == "development" else None
openapi_url = "/openapi.json" if settings.ENV == "development" else None

AUDITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# ==================== LIFESPAN EVENTS ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestiona el startup y shutdown de la aplicación.
    """
    # Startup
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    logger.info(f"{settings.API_TITLE} v{settings.API_VERSION} iniciada ({settings.ENV})")
    yield
    # Shutdown
    stop_scheduler()

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_url=openapi_url,
    redirect_slashes=False,  # Evita redirects 307
    lifespan=lifespan
)

# CORS config - allow_credentials=True necesario para la cookie de sesión
allow_origins = [origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "X-CSRF-Token"],
)

# ==================== CSRF PROTECTION MIDDLEWARE ====================

app.add_middleware(CSRFMiddleware)

# ==================== REQUEST LOGGING MIDDLEWARE ====================

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Registra cada petición con su duración y agrega X-Response-Time.
    Las peticiones que modifican datos dejan además una línea de auditoría.
    """
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000

    response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.2f}ms")

    if request.method in AUDITED_METHODS:
        user_id = getattr(request.state, "user_id", None) or "guest"
        audit_logger.info(
            f"[AUDIT] {request.method} {request.url.path} user={user_id} status={response.status_code}"
        )

    return response

# ==================== EXCEPTION HANDLERS ====================

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """
    Errores de dominio lanzados por servicios y dependencias.
    """
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """
    Violación de restricción única no detectada por la verificación previa.
    La sesión se descarta al cerrar get_db().
    """
    logger.warning(f"IntegrityError en {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "success": False,
            "status_code": 409,
            "message": "Resource already exists",
            "error": "CONFLICT"
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Maneja errores de validación de Pydantic y los convierte al formato estándar.
    """
    errors = exc.errors()

    error_messages = []
    validation_errors = []

    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"][1:])  # Omitir 'body' / 'query'
        msg = error["msg"]
        error_type = error["type"]

        # Mensajes según el tipo de error
        if error_type == "string_too_short":
            min_length = error.get("ctx", {}).get("min_length", "")
            error_messages.append(f"Field '{field}' must have at least {min_length} characters")
        elif error_type == "string_too_long":
            max_length = error.get("ctx", {}).get("max_length", "")
            error_messages.append(f"Field '{field}' must have at most {max_length} characters")
        elif error_type == "missing":
            error_messages.append(f"Field '{field}' is required")
        elif error_type == "value_error":
            error_messages.append(f"Field '{field}': {msg.removeprefix('Value error, ')}")
        elif error_type.startswith("greater_than") or error_type.startswith("less_than"):
            # "Input should be greater than or equal to 0"
            error_messages.append(f"Field '{field}': {msg.replace('Input should', 'must')}")
        elif "email" in error_type.lower():
            error_messages.append(f"Field '{field}' must be a valid email")
        else:
            error_messages.append(f"Field '{field}': {msg}")

        validation_errors.append({
            "field": field,
            "message": error_messages[-1],
            "type": error_type
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "status_code": 400,
            "message": "Validation error: " + "; ".join(error_messages),
            "error": "VALIDATION_ERROR",
            "details": validation_errors
        }
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Error no controlado en {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "status_code": 500,
            "message": "Internal server error",
            "error": "INTERNAL_SERVER_ERROR"
        }
    )

# Registrar routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(vendors_router)

@app.get("/")
async def root():
    return {
        "message": "Welcome to the Marketplace API",
        "version": settings.API_VERSION,
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
