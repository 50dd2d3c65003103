"""Process-wide logging setup. Library modules only call logging.getLogger(__name__)."""

import logging


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SDK/transport loggers are chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the whole application."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
