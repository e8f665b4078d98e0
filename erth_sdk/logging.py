"""
ERTH SDK - Structured Logging

JSON-per-line logging for pipeline operations. Never pass mnemonics,
private keys or plaintext messages as log details.
"""

import logging
import json
import time
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict
from enum import Enum


class LogLevel(Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class LogEntry:
    """Structured log entry."""
    timestamp: float
    level: str
    message: str
    component: str
    operation: Optional[str] = None
    tx_hash: Optional[str] = None
    duration_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    
    def to_dict(self) -> dict:
        """Convert to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}
    
    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """
    Structured logger for pipeline operations.
    
    Example:
        logger = StructuredLogger(component="erth-sdk")
        
        with logger.operation("execute") as op:
            result = pipeline.execute(calls)
            op.set_tx_hash(result.tx_hash)
        
        logger.info("Broadcast accepted", tx_hash="ABC...")
    """
    
    def __init__(
        self,
        component: str = "erth-sdk",
        logger: Optional[logging.Logger] = None,
        json_output: bool = True
    ):
        self.component = component
        self.json_output = json_output
        self._logger = logger or logging.getLogger(component)
    
    def _log(
        self,
        level: LogLevel,
        message: str,
        operation: str = None,
        tx_hash: str = None,
        duration_ms: float = None,
        error: str = None,
        **kwargs
    ) -> LogEntry:
        """Create and emit a log entry."""
        entry = LogEntry(
            timestamp=time.time(),
            level=level.value,
            message=message,
            component=self.component,
            operation=operation,
            tx_hash=tx_hash,
            duration_ms=duration_ms,
            details=kwargs if kwargs else None,
            error=error
        )
        
        if self.json_output:
            log_message = entry.to_json()
        else:
            log_message = f"[{entry.level}] {entry.message}"
            if entry.tx_hash:
                log_message += f" tx_hash={entry.tx_hash}"
            if entry.duration_ms:
                log_message += f" duration={entry.duration_ms:.2f}ms"
        
        log_method = getattr(self._logger, level.value.lower())
        log_method(log_message)
        
        return entry
    
    def debug(self, message: str, **kwargs) -> LogEntry:
        return self._log(LogLevel.DEBUG, message, **kwargs)
    
    def info(self, message: str, **kwargs) -> LogEntry:
        return self._log(LogLevel.INFO, message, **kwargs)
    
    def warning(self, message: str, **kwargs) -> LogEntry:
        return self._log(LogLevel.WARNING, message, **kwargs)
    
    def error(self, message: str, error: Exception = None, **kwargs) -> LogEntry:
        error_str = str(error) if error else None
        return self._log(LogLevel.ERROR, message, error=error_str, **kwargs)
    
    def operation(self, name: str) -> "OperationContext":
        """Create an operation context that logs duration on exit."""
        return OperationContext(self, name)
    
    def set_level(self, level: LogLevel) -> None:
        self._logger.setLevel(getattr(logging, level.value))


class OperationContext:
    """Context manager for timing operations."""
    
    def __init__(self, logger: StructuredLogger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time: float = 0
        self.tx_hash: Optional[str] = None
        self.details: Dict[str, Any] = {}
    
    def __enter__(self) -> "OperationContext":
        self.start_time = time.time()
        self.logger.debug(f"Starting {self.operation}", operation=self.operation)
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration_ms = (time.time() - self.start_time) * 1000
        
        if exc_val:
            self.logger.error(
                f"Failed {self.operation}",
                operation=self.operation,
                duration_ms=duration_ms,
                error=exc_val,
                tx_hash=self.tx_hash,
                **self.details
            )
        else:
            self.logger.info(
                f"Completed {self.operation}",
                operation=self.operation,
                duration_ms=duration_ms,
                tx_hash=self.tx_hash,
                **self.details
            )
    
    def set_tx_hash(self, tx_hash: str) -> None:
        self.tx_hash = tx_hash
    
    def add_detail(self, key: str, value: Any) -> None:
        self.details[key] = value


def create_file_logger(
    filepath: str,
    component: str = "erth-sdk",
    level: LogLevel = LogLevel.INFO
) -> StructuredLogger:
    """Create a structured logger that appends JSON lines to a file."""
    logger = logging.getLogger(f"{component}-file")
    handler = logging.FileHandler(filepath)
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.value))
    
    return StructuredLogger(component=component, logger=logger)
