"""Exception handlers for the storefront API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.backend.port import BackendError


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """Protean's domain exception mapping, plus backend failures as 502."""
    register_exception_handlers(app)
    app.add_exception_handler(BackendError, backend_error_handler)
