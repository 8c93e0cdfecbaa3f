"""Logging configuration for the mailbox commands."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> None:
    """Configure logging.

    - Console (stderr): INFO and above; stdout stays clean for JSON results
    - File (rotating): complete troubleshooting logs
    - Error file (rotating): errors only
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Repeated calls (one per CLI invocation in tests) must not stack handlers
    for handler in list(root_logger.handlers):
        if getattr(handler, "_ews_mailbox", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handlers = [console_handler]

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            path / "ews-mailbox.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

        error_handler = RotatingFileHandler(
            path / "ews-mailbox-errors.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=3
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.extend([file_handler, error_handler])

    for handler in handlers:
        handler._ews_mailbox = True
        root_logger.addHandler(handler)

    # External library logging: WARNING to reduce noise
    logging.getLogger("exchangelib").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("requests_ntlm").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging initialized: level={log_level}, dir={log_dir}")


class AuditLogger:
    """Audit trail for operations that change a mailbox."""

    def __init__(self, log_dir: Optional[str] = None):
        self.logger = logging.getLogger("ews_mailbox.audit")
        self.logger.setLevel(logging.INFO)

        if log_dir and not self.logger.handlers:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)
            audit_handler = RotatingFileHandler(
                path / "audit.log",
                maxBytes=20*1024*1024,  # 20MB
                backupCount=10
            )
            audit_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            self.logger.addHandler(audit_handler)
            self.logger.propagate = False

    def log_operation(
        self,
        operation: str,
        mailbox: str,
        success: bool,
        details: Dict[str, Any] = None
    ) -> None:
        """Log operation for audit trail."""
        message = f"op={operation} | mailbox={mailbox} | success={success}"
        if details:
            message += f" | {details}"

        if success:
            self.logger.info(message)
        else:
            self.logger.warning(message)


_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get or create the process audit logger."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def configure_audit_logger(log_dir: Optional[str]) -> AuditLogger:
    global _audit_logger
    _audit_logger = AuditLogger(log_dir)
    return _audit_logger
