"""Structured logging for templatehub."""

import structlog

LOG_LEVELS = {
    "ERROR": 40,
    "WARNING": 30,
    "INFO": 20,
    "DEBUG": 10,
    "TRACE": 5,
}


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger bound to a module name.

    The level is read from ``advanced.log_level`` on every call so a reloaded
    configuration takes effect for loggers created afterwards.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Configured logger instance
    """
    from templatehub.config import get_config

    config = get_config()
    log_dir = config.paths.logs_dir
    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)

    log_level = LOG_LEVELS.get(config.advanced.log_level, 20)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,  # Disable cache to allow level updates
    )

    return structlog.get_logger(name)
