import logging

from fastapi import FastAPI
from storefront.version import VERSION
from storefront.api import checkout, orders, recommendations, shopping_cart, store
from storefront.core.errors import register_exception_handlers
from storefront.core.logging import configure_logging
from storefront.core.telemetry import create_telemetry_provider
from prometheus_fastapi_instrumentator import Instrumentator

configure_logging()
logger = logging.getLogger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title="Storefront", version=VERSION)
app.state.telemetry = create_telemetry_provider()

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/storefront/metrics",
    should_gzip=True,
)

register_exception_handlers(app)

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/storefront/health")
def storefront_health():
    return {"status": "ok"}

@app.get("/v1/_info")
def info():
    return {"service": "storefront", "version": VERSION}

@app.on_event("startup")
async def startup_event():
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.debug("%s %s", sorted(route.methods), route.path)

app.include_router(store.router, tags=["store"])
app.include_router(shopping_cart.router, prefix="/ShoppingCart", tags=["cart"])
app.include_router(recommendations.router, prefix="/Recommendations", tags=["recommendations"])
app.include_router(checkout.router, prefix="/Checkout", tags=["checkout"])
app.include_router(orders.router, prefix="/Orders", tags=["orders"])
