import sentry_sdk

from brand_ledger.errors import LedgerError
from finance_api.core.config import settings


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.2)
        sentry_sdk.set_tag("ledger.currency", settings.currency)


def capture_store_failure(exc: BaseException, path: str | None = None) -> bool:
    """Report a 5xx ledger failure; returns False when monitoring is off."""
    if not settings.sentry_dsn:
        return False
    tags = {"ledger.error_code": exc.code if isinstance(exc, LedgerError) else type(exc).__name__}
    if path:
        tags["ledger.route"] = path
    sentry_sdk.capture_exception(exc, tags=tags)
    return True
