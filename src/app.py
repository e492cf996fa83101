"""Storefront FastAPI application.

Web server that processes checkout, payment and order lifecycle commands
synchronously via HTTP. Each request is wrapped in the storefront domain
context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import configure_logging

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("PROTEAN_ENV") == "production",
)

storefront.init()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Checkout, hosted payment verification and order lifecycle",
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
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api.errors import register_error_handlers  # noqa: E402
from storefront.api.routes import order_router, payment_router  # noqa: E402

app.include_router(order_router)
app.include_router(payment_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": storefront.name}})
