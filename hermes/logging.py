"""日志配置：structlog 彩色控制台输出，并接管标准库 logging（uvicorn、sqlalchemy 等）"""

import logging
import sys

import structlog
from structlog.typing import Processor

from .config.settings import settings


def configure_logging(level: str = None) -> None:
    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty(), exception_formatter=structlog.dev.plain_traceback),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    level = (level or settings.LOG_LEVEL).upper()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # SQL 语句日志由 ECHO_SQL 控制，这里只保留告警
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


_configured = False


def setup_logging(level: str = None) -> None:
    """只配置一次，可重复调用"""
    global _configured
    if not _configured:
        configure_logging(level)
        _configured = True
