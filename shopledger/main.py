from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from shopledger.config import get_settings
from shopledger.database import engine, Base, SessionLocal
from shopledger.api import products, orders, reports, health
from shopledger.services.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from shopledger.services.product_service import ProductService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

    if settings.SEED_SAMPLE_PRODUCTS:
        db = SessionLocal()
        try:
            ProductService(db).seed_sample_products()
        finally:
            db.close()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    A product catalog and order ledger with sales reporting:

    - **Products**: CRUD for catalog items with a positive unit price
    - **Orders**: sales recorded against a product; the total price is
      recomputed from the product's current price on every order write
    - **Reports**: top sellers, overall sales summary and per-product performance
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return _failure(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _failure(status.HTTP_400_BAD_REQUEST, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _failure(status.HTTP_404_NOT_FOUND, exc.message)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _failure(status.HTTP_409_CONFLICT, exc.message)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": exc.message},
    )


# Include API routers
app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(products.router, prefix=settings.API_PREFIX)
app.include_router(orders.router, prefix=settings.API_PREFIX)
app.include_router(reports.router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "endpoints": {
            "products": f"{settings.API_PREFIX}/products",
            "orders": f"{settings.API_PREFIX}/orders",
            "reports": f"{settings.API_PREFIX}/report/top-sellers",
            "health": f"{settings.API_PREFIX}/health",
        }
    }
