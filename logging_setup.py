import logging
import os
from pathlib import Path

import structlog

# Socket.IO and urllib3 log every packet/connection at INFO
NOISY_LOGGERS = ('urllib3', 'engineio', 'socketio', 'werkzeug')


def setup_logging(level=None, log_file=None, log_format=None):
    """
    Route every structlog logger in the app through the stdlib root logger.

    level: LOG_LEVEL, default INFO
    log_file: LOG_FILE, JSON lines appended next to the console output
    log_format: LOG_FORMAT, 'json' (default) or 'console' for a local debug run
    """
    lvl = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    file_path = log_file or os.environ.get('LOG_FILE')
    fmt = (log_format or os.environ.get('LOG_FORMAT', 'json')).lower()

    root = logging.getLogger()
    root.setLevel(lvl)
    root.handlers.clear()

    handlers = [logging.StreamHandler()]
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path))
    for handler in handlers:
        handler.setLevel(lvl)
        handler.setFormatter(logging.Formatter('%(message)s'))
        root.addHandler(handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    renderer = structlog.dev.ConsoleRenderer() if fmt == 'console' else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt='iso', utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, lvl, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module loggers are created at import, before main() configures logging
        cache_logger_on_first_use=False,
    )


def get_logger(**kwargs):
    # Stays a lazy proxy; the bound logger is built from whatever config is current at each call
    return structlog.get_logger(**kwargs)
