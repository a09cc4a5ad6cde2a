import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
    ]

    structlog.configure(
        processors=
        shared_processors
        + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
    )

    logging.basicConfig(level=level.upper())


def bind_tenant(brand_id: str, actor_user_id: str) -> None:
    """Attach the resolved tenant to every log line of the current request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(brand_id=brand_id, actor_user_id=actor_user_id)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
