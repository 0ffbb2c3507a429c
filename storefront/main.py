import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from storefront.version import VERSION
from storefront.api import admin, checkout, orders, products, webhooks
from storefront.core.config import settings
from storefront.core.errors import StorefrontError
from storefront.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title="Storefront", version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/metrics",
    should_gzip=True,
)

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request for %s %s: %s", request.method, request.url.path, exc.errors())
    in_body = any(err.get("loc", ("",))[0] == "body" for err in exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body" if in_body else "Invalid request"})

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/v1/_info")
def info():
    return {"service": "storefront", "version": VERSION}

@app.on_event("startup")
async def startup_event():
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.debug("%s %s", sorted(route.methods), route.path)

app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(checkout.router, prefix="/api", tags=["checkout"])
app.include_router(orders.router, prefix="/api", tags=["orders"])
app.include_router(webhooks.router, prefix="/api", tags=["webhooks"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
