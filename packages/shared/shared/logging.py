import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that write a line per outbound request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")

_configured = False


def configure_logging(level: Optional[str] = None, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Configure root logging for the process. Only the first call has an
    effect. An unknown or empty `level` means INFO.
    """
    global _configured
    if _configured:
        return

    resolved = getattr(logging, (level or "INFO").upper(), None)
    logging.basicConfig(
        level=resolved if isinstance(resolved, int) else logging.INFO,
        format=fmt,
        stream=sys.stdout,
    )
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
