from __future__ import annotations
import logging, sys
import structlog


def _level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    lvl = logging.getLevelName(value.upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def configure_logging(level: str | int = logging.INFO) -> None:
    """JSON lines on stdout; request_id and other bound contextvars ride along."""
    lvl = _level(level)
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    structlog.configure(
        processors=shared + [
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        cache_logger_on_first_use=True,
    )

    # stdlib records (uvicorn, sqlalchemy, alembic) go through the same renderer
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, structlog.processors.JSONRenderer()],
    ))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
