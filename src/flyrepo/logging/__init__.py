"""flyrepo logging: logging port and structlog adapter."""

from flyrepo.logging.port import LoggingPort
from flyrepo.logging.structlog_adapter import LIBRARY_LOGGER, StructlogAdapter

__all__ = ["LIBRARY_LOGGER", "LoggingPort", "StructlogAdapter"]
