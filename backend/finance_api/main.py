from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brand_ledger.errors import (
    AlreadyProcessedError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    StoreError,
)
from finance_api.api.routes import health
from finance_api.core.config import settings
from finance_api.core.logging import configure_logging, get_logger
from finance_api.core.monitoring import capture_store_failure, configure_error_monitoring
from finance_api.core.observability import configure_observability
from finance_api.domains.budgets.router import router as budgets_router
from finance_api.domains.employees.router import router as employee_router
from finance_api.domains.notifications.router import router as notifications_router
from finance_api.domains.pending_costs.router import router as pending_costs_router
from finance_api.domains.reporting.router import router as reporting_router
from finance_api.domains.salary_payments.router import router as salary_payments_router
from finance_api.domains.wallets.router import router as wallets_router

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.cors_origins] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(employee_router)
app.include_router(salary_payments_router)
app.include_router(pending_costs_router)
app.include_router(wallets_router)
app.include_router(budgets_router)
app.include_router(notifications_router)
app.include_router(reporting_router)

ERROR_STATUS = {
    NotFoundError: 404,
    InvalidArgumentError: 400,
    AlreadyProcessedError: 409,
    StoreError: 500,
}


def _status_for(exc: LedgerError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("ledger_error", path=request.url.path, code=exc.code, error=exc.message)
        capture_store_failure(exc, path=request.url.path)
    else:
        logger.info("ledger_rejected", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Brand finance API running", "environment": settings.env}
