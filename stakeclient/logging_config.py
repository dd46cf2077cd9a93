"""
Structured logging for the client, built on structlog.

stdlib `logging` calls from every module are routed through the same
processor chain, so wallet code can keep using `logging.getLogger`.
Secret material is masked before anything is rendered.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog

from .config import settings

# Keys that may carry the local wallet secret or provider signatures
REDACTED_KEYS = frozenset({"privateKey", "private_key", "secret_material", "signature"})
_MASK = "***"


def redact_secrets(
    _: Any, __: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking secret-bearing fields, one level deep."""
    for key, value in list(event_dict.items()):
        if key in REDACTED_KEYS:
            event_dict[key] = _MASK
        elif isinstance(value, dict) and REDACTED_KEYS.intersection(value):
            event_dict[key] = {k: (_MASK if k in REDACTED_KEYS else v) for k, v in value.items()}
    return event_dict


def _use_console(log_format: str) -> bool:
    if log_format == "console":
        return True
    if log_format == "json":
        return False
    return sys.stderr.isatty()


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the structlog pipeline on the root logger.

    Args:
        log_level: Override settings.log_level
        log_format: Override settings.log_format
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
    ]

    if _use_console(log_format or settings.log_format):
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    else:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # One line per probe request otherwise
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
