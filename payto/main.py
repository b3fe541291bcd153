from fastapi import FastAPI, Request, HTTPException
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import middleware
from payto.common.middleware import CompanyContextMiddleware, SecurityHeadersMiddleware
from payto.common.errors import ErrorLog, code_for_status
from payto.core.events import RefreshBus, COMPANIES_CHANGED

# Import routers
from payto.modules.company.router import router as company_router
from payto.modules.invoices.router import router as invoices_router
from payto.modules.vouchers.router import router as vouchers_router
from payto.modules.contacts.router import clients_router, suppliers_router
from payto.modules.payments.router import payments_router, collections_router
from payto.modules.members.router import router as members_router
from payto.modules.network.router import router as network_router
from payto.modules.afip.router import router as afip_router
from payto.modules.audit.router import router as audit_router
from payto.modules.tasks.router import router as tasks_router
from payto.modules.iva_book.router import router as iva_book_router
from payto.modules.accounts.router import payable_router, receivable_router
from payto.modules.analytics.router import router as analytics_router
from payto.modules.notifications.router import router as notifications_router
from payto.modules.bank_accounts.router import router as bank_accounts_router

from payto.modules.company.cache import CompanyListCache
from payto.modules.contacts.forms import build_form_factory

from payto.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="PayTo",
    description="Backend-for-frontend de PayTo: facturación electrónica, cobros y pagos para empresas argentinas",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Shared application state
app.state.refresh_bus = RefreshBus()
app.state.error_log = ErrorLog()
app.state.form_factory = build_form_factory()
app.state.company_cache = CompanyListCache()
app.state.refresh_bus.subscribe(COMPANIES_CHANGED, app.state.company_cache.invalidate)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CompanyContextMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Company-ID"],
)

# Include routers
app.include_router(company_router)
app.include_router(invoices_router)
app.include_router(vouchers_router)
app.include_router(clients_router)
app.include_router(suppliers_router)
app.include_router(payments_router)
app.include_router(collections_router)
app.include_router(members_router)
app.include_router(network_router)
app.include_router(afip_router)
app.include_router(audit_router)
app.include_router(tasks_router)
app.include_router(iva_book_router)
app.include_router(payable_router)
app.include_router(receivable_router)
app.include_router(analytics_router)
app.include_router(notifications_router)
app.include_router(bank_accounts_router)


@app.exception_handler(HTTPException)
async def record_http_exception(request: Request, exc: HTTPException):
    """Registrar el error en el ErrorLog y responder como FastAPI por defecto"""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    request.app.state.error_log.record(
        code_for_status(exc.status_code).value,
        message,
        context=f"{request.method} {request.url.path}"
    )
    return await http_exception_handler(request, exc)


@app.get("/")
async def read_root():
    return {
        "message": "PayTo API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check(request: Request):
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "errors": request.app.state.error_log.stats()
    }


@app.on_event("startup")
async def startup_event():
    logger.info("PayTo starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Upstream API: {settings.api_base_url}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("PayTo shutting down...")
