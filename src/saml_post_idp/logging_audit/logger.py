"""Root logger setup for saml-post-idp.

Log records from every package module reach two handlers installed on the
root logger: the console at the requested level and a size-rotated file
that keeps everything down to DEBUG. Both share one
IdentityRedactingFormatter, so switching on redaction hides e-mail
NameIDs and signature material in both destinations.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from .formatters import IdentityRedactingFormatter

# Constants
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path("logs") / "saml-post-idp.log"
LOG_FILE_ENV_VAR = "SAML_IDP_LOG_FILE"
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Names of the handlers this module owns on the root logger
CONSOLE_HANDLER_NAME = "saml_post_idp.console"
FILE_HANDLER_NAME = "saml_post_idp.file"

_logging_configured = False

logger = logging.getLogger(__name__)


def _parse_level(level: str) -> int:
    name = level.upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVEL_NAMES)}")
    return getattr(logging, name)


def _resolve_log_file(log_file: Optional[Path]) -> Path:
    """Pick the log file: explicit argument, then environment, then default.

    The parent directory is created so the rotating handler can open it.
    """
    if log_file is None:
        from_env = os.environ.get(LOG_FILE_ENV_VAR)
        log_file = Path(from_env) if from_env else DEFAULT_LOG_FILE

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(
            f"Cannot create log directory {log_file.parent} for the identity provider: {e}"
        ) from e
    return log_file


def _owned_handlers(root: logging.Logger) -> List[logging.Handler]:
    return [h for h in root.handlers if h.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME)]


def _attach(
    root: logging.Logger,
    handler: logging.Handler,
    name: str,
    level: int,
    formatter: logging.Formatter,
) -> None:
    handler.set_name(name)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    redact_identities: bool = False,
) -> None:
    """Route package logging to the console and a rotating log file.

    Calling it again replaces the console and file handlers installed by the
    previous call; handlers added by anything else are left alone.

    Args:
        level: Console threshold (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            The file always receives DEBUG and above.
        log_file: Log file path. Defaults to $SAML_IDP_LOG_FILE, then
            logs/saml-post-idp.log.
        redact_identities: Mask e-mail addresses (the usual NameID) and
            signature material in every handler

    Raises:
        ValueError: Unknown level name
        RuntimeError: The log directory cannot be created

    Example:
        >>> configure_logging(level="DEBUG", redact_identities=True)
    """
    global _logging_configured

    console_level = _parse_level(level)
    log_file = _resolve_log_file(log_file)

    root = logging.getLogger()
    if _logging_configured:
        for handler in _owned_handlers(root):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.DEBUG)

    formatter = IdentityRedactingFormatter(
        fmt=DEFAULT_LOG_FORMAT, redact_identities=redact_identities
    )
    _attach(root, logging.StreamHandler(), CONSOLE_HANDLER_NAME, console_level, formatter)

    try:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        # Console output still works without the file
        logger.warning(f"Log file {log_file} unavailable ({e}); logging to console only")
    else:
        _attach(root, file_handler, FILE_HANDLER_NAME, logging.DEBUG, formatter)

    _logging_configured = True
    logger.debug(
        f"Logging configured: console={level.upper()}, file={log_file}, "
        f"redact_identities={redact_identities}"
    )


def get_logger(module_name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(module_name)
