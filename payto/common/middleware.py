"""
Middleware para el contexto de empresa activa
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging

logger = logging.getLogger(__name__)


class CompanyContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that extracts the active company from the X-Company-ID header
    and sets it on request.state.company_id for company-scoped endpoints
    """

    # Exact paths that don't require company context
    EXEMPT_PATHS = {"/", "/health"}

    # Path prefixes that don't require company context
    EXEMPT_PREFIXES = (
        "/docs",
        "/redoc",
        "/openapi.json",
        "/companies",
        "/tasks",
    )

    def is_exempt(self, path: str) -> bool:
        return path in self.EXEMPT_PATHS or path.startswith(self.EXEMPT_PREFIXES)

    async def dispatch(self, request: Request, call_next):
        # Skip for OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS" or self.is_exempt(request.url.path):
            return await call_next(request)

        company_id = (request.headers.get("X-Company-ID") or "").strip()
        if not company_id:
            return JSONResponse(
                content={"detail": "Falta el header X-Company-ID"},
                status_code=status.HTTP_400_BAD_REQUEST
            )

        request.state.company_id = company_id
        logger.debug(f"Request to {request.url.path} with company_id: {company_id}")

        response = await call_next(request)
        response.headers["X-Company-ID"] = company_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
