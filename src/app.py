"""Storefront FastAPI application.

Serves the storefront over HTTP. Every browser gets its own StorefrontShell
(catalog, cart, checkout, signed-in user), keyed by a signed session cookie;
every request runs inside the storefront domain context.

Usage:
    uvicorn src.app:app --host 127.0.0.1 --port 8000 --reload
"""

import os
from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied. The backend adapter is
# chosen from STOREFRONT_BACKEND_URL / STOREFRONT_BACKEND_KEY.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.backend import get_backend
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

storefront.init()

# Browsers allowed to call the API with credentials, comma separated
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("STOREFRONT_ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop every open shell's auth subscription on shutdown."""
    yield
    app.state.shells.close_all()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce storefront: catalog, cart, checkout, orders and product admin",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Routers and per-browser shells
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    admin_router,
    auth_router,
    catalog_router,
    checkout_router,
    install_shell_sessions,
    orders_router,
    register_error_handlers,
)

app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(admin_router)
register_error_handlers(app)
install_shell_sessions(app)


# Added after the session middleware so shells are opened inside the domain context
@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and start a fresh log context."""
    clear_context()
    add_context(path=request.url.path)

    with storefront.domain_context():
        response = await call_next(request)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": {"name": storefront.name},
            "backend": {"adapter": type(get_backend()).__name__},
            "shells": len(app.state.shells),
        }
    )
