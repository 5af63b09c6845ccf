"""M-Mart Checkout FastAPI application.

Web server for the checkout: payment methods, order placement, gateway
return handling and order lookup. Commands are processed synchronously and
every request runs inside the checkout domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects protean's config overlay and the log renderer.
from checkout.api import (
    checkout_router,
    order_router,
    payment_method_router,
    register_exception_handlers,
)
from checkout.domain import checkout
from checkout.gateway import get_gateway
from checkout.payment_method.management import seed_default_payment_methods
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

checkout.init()

with checkout.domain_context():
    seed_default_payment_methods()

_DOMAIN_ROUTES = ("/payment-methods", "/checkout", "/orders")

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="M-Mart Checkout API",
    description="Checkout payment orchestration and order lifecycle",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the checkout domain context for domain routes."""
    if request.url.path.startswith(_DOMAIN_ROUTES):
        with checkout.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(payment_method_router)
app.include_router(checkout_router)
app.include_router(order_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": checkout.name,
            "gateway": type(get_gateway()).__name__,
        }
    )
