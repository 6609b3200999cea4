"""
Apparel Platform - Backend API
Custom apparel store: catalog, designs, cart, checkout, quotes and fulfillment
"""
import logging
import time
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apparel.api import (
    admin_catalog,
    cart,
    dashboard,
    design_templates,
    designs,
    feedback,
    orders,
    payments,
    products,
    request_quotes,
    shipping,
    transactions,
    uploads,
    users,
)
from apparel.core.config import settings
from apparel.core.database import create_schema, get_db_connection_with_retry
from apparel.core.exceptions import AppError
from apparel.core.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.on_event("startup")
async def bootstrap_schema():
    if settings.AUTO_CREATE_SCHEMA:
        create_schema()


# Include API routers
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(admin_catalog.router, prefix="/api/v1/admin", tags=["Admin Catalog"])
app.include_router(designs.router, prefix="/api/v1/designs", tags=["Designs"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(payments.router, prefix="/api/v1/payments", tags=["Payments"])
app.include_router(transactions.router, prefix="/api/v1/admin/transactions", tags=["Transactions"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(orders.admin_router, prefix="/api/v1/admin/orders", tags=["Admin Orders"])
app.include_router(shipping.router, prefix="/api/v1/shipping", tags=["Shipping"])
app.include_router(design_templates.router, prefix="/api/v1/design-templates", tags=["Design Templates"])
app.include_router(request_quotes.router, prefix="/api/v1/request-quotes", tags=["Request Quotes"])
app.include_router(dashboard.router, prefix="/api/v1/admin/dashboard", tags=["Dashboard"])
app.include_router(feedback.router, prefix="/api/v1/feedback", tags=["Feedback"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(uploads.router, prefix="/api/v1/uploads", tags=["Uploads"])


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": settings.API_TITLE,
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    db_status = "unknown"
    db_latency_ms = None
    db_error = None

    try:
        conn = get_db_connection_with_retry(max_retries=1, retry_delay=0.5)
        cursor = conn.cursor()

        db_start = time.time()
        cursor.execute("SELECT 1")
        cursor.fetchone()
        db_latency_ms = round((time.time() - db_start) * 1000, 2)

        cursor.close()
        conn.close()
        db_status = "connected"
    except Exception as e:
        db_status = "disconnected"
        db_error = str(e)

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "apparel-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error
        },
        "integrations": {
            "stripe": bool(settings.STRIPE_SECRET_KEY),
            "identity_provider": bool(settings.CLERK_SECRET_KEY),
            "storage": bool(settings.SUPABASE_URL)
        },
        "total_latency_ms": total_latency_ms
    }
