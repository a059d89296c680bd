import logging
import os
import sys
import structlog

from .utils import mask_password_values

RENDERERS = {
    'console': structlog.dev.ConsoleRenderer,
    'json': structlog.processors.JSONRenderer,
}


def redact_passwords(logger, method_name, event_dict):
    """Mask `password=` values in any string field before it is rendered."""
    for key, value in event_dict.items():
        if isinstance(value, str) and 'password=' in value.lower():
            event_dict[key] = mask_password_values(value)
    return event_dict


def configure_logging(level: str = None, fmt: str = None, stream=None):
    """Configure structlog over stdlib logging.

    Logs go to stderr by default so stdout carries only what the commands
    and the status report print. LOG_LEVEL and LOG_FORMAT (console|json)
    apply when arguments are not given.
    """
    level_name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    renderer = RENDERERS.get((fmt or os.environ.get('LOG_FORMAT', 'console')).lower(),
                             structlog.dev.ConsoleRenderer)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_passwords,
            renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    configure_logging.done = True


def get_logger(name: str = None):
    """Return a structured logger, configuring logging on first use."""
    if not getattr(configure_logging, 'done', False):
        configure_logging()
    return structlog.get_logger(name)
