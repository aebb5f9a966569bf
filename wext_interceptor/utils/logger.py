"""
Logging infrastructure for the webhook interceptor.

Provides structured logging with configurable formats and levels.

This module offers:
- JSON and text formatters with customizable output
- Trigger-aware log lines (``[trigger] message`` plus a ``trigger`` field)
- Secure logging with redaction of webhook secrets and signatures

Example:
    >>> from wext_interceptor.utils.logger import get_logger, setup_logging
    >>> setup_logging(level="DEBUG", format_type="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Interceptor started", extra={"trigger": "my-trigger"})
"""

import logging
import sys
import json
import re
import hashlib
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union, List, Pattern
from pathlib import Path
from enum import Enum


class LogLevel(Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Supported log formats."""
    JSON = "json"
    TEXT = "text"


class Colors:
    """ANSI color codes for console output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    MAGENTA = '\033[35m'
    RESET = '\033[0m'
    
    LEVEL_COLORS = {
        LogLevel.DEBUG.value: CYAN,
        LogLevel.INFO.value: GREEN,
        LogLevel.WARNING.value: YELLOW,
        LogLevel.ERROR.value: RED,
        LogLevel.CRITICAL.value: MAGENTA,
    }


# Field names whose values never reach a log sink
SENSITIVE_FIELDS = {
    'authorization', 'token', 'password', 'secret', 'api_key',
    'access_token', 'secret_token', 'credential', 'credentials',
    'signature', 'webhook_secret', 'webhook_signature',
    'x-hub-signature', 'x-hub-signature-256', 'x-gitlab-token',
    'github_token', 'gitlab_token',
}

DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Standard log record fields to exclude when copying extra fields
STANDARD_LOG_FIELDS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message',
}


# ============================================================================
# Sensitive Data Redaction
# ============================================================================

class RedactionLevel(Enum):
    """Different levels of data redaction."""
    NONE = "none"          # No redaction
    BASIC = "basic"        # Field name matching only
    STANDARD = "standard"  # Field names plus signature/token patterns
    AGGRESSIVE = "aggressive"  # Also long hex and alphanumeric runs


class SensitiveDataRedactor:
    """
    Redacts webhook secrets from log messages and structured fields.
    
    Field-name matching catches ``extra={"secret_token": ...}`` style
    values; pattern matching catches signature headers and tokens that
    end up interpolated into message strings.
    """
    
    def __init__(self, level: RedactionLevel = RedactionLevel.STANDARD):
        """
        Initialize the redactor with specified level.
        
        Args:
            level: Redaction level to apply
        """
        self.level = level
        self.redaction_placeholder = "***REDACTED***"
        self.hash_placeholder = "***HASH:{hash}***"
        self._compile_patterns()
    
    def _compile_patterns(self) -> None:
        """Compile regex patterns for sensitive data detection."""
        self.patterns: List[Pattern] = []
        
        if self.level in [RedactionLevel.STANDARD, RedactionLevel.AGGRESSIVE]:
            self.patterns.extend([
                # Webhook signature header values
                re.compile(r'(?i)(sha(?:1|256|512)=)([a-f0-9]{16,})'),
                # Token/secret assignments
                re.compile(r'(?i)((?:secret|token)[_-]?(?:token)?["\s]*[:=]["\s]*)([^\s",}]{6,})'),
                # Bearer tokens
                re.compile(r'(?i)(bearer\s+)([a-zA-Z0-9_\-\.]{8,})'),
                # URLs with credentials
                re.compile(r'(?i)(https?://[^:/\s]+:)([^@\s]+)@'),
            ])
        
        if self.level == RedactionLevel.AGGRESSIVE:
            self.patterns.extend([
                re.compile(r'(?i)(["\s]*)([a-f0-9]{32,128})'),
                re.compile(r'(["\s]*)([a-zA-Z0-9]{40,})'),
            ])
    
    def redact_dict(self, data: Dict[str, Any], preserve_length: bool = False) -> Dict[str, Any]:
        """
        Recursively redact sensitive data in a dictionary.
        
        Args:
            data: Dictionary to redact
            preserve_length: Whether to preserve data length in redaction
            
        Returns:
            Dictionary with sensitive data redacted
        """
        if not isinstance(data, dict):
            return data
        
        return {key: self._redact_value(key, value, preserve_length) for key, value in data.items()}
    
    def redact_string(self, text: str) -> str:
        """
        Redact sensitive information from a string.
        
        Args:
            text: String to redact
            
        Returns:
            Redacted string
        """
        if not isinstance(text, str) or self.level == RedactionLevel.NONE:
            return text
        
        redacted_text = text
        for pattern in self.patterns:
            if self.level == RedactionLevel.AGGRESSIVE:
                def hashed(match):
                    prefix, sensitive_value = match.group(1), match.group(2)
                    digest = hashlib.sha256(sensitive_value.encode()).hexdigest()[:8]
                    return f"{prefix}{self.hash_placeholder.format(hash=digest)}"
                
                redacted_text = pattern.sub(hashed, redacted_text)
            else:
                redacted_text = pattern.sub(
                    lambda match: f"{match.group(1)}{self.redaction_placeholder}",
                    redacted_text,
                )
        
        return redacted_text
    
    def is_sensitive_key(self, key: str) -> bool:
        """Check whether a field name marks its value as sensitive."""
        lowered = key.lower()
        return lowered in SENSITIVE_FIELDS or any(sensitive in lowered for sensitive in SENSITIVE_FIELDS)
    
    def _redact_value(self, key: str, value: Any, preserve_length: bool = False) -> Any:
        """
        Redact a value based on its key and content.
        
        Args:
            key: The field key
            value: The value to potentially redact
            preserve_length: Whether to preserve data length
            
        Returns:
            Original value or redacted version
        """
        if value is None or self.level == RedactionLevel.NONE:
            return value
        
        if isinstance(value, dict):
            return self.redact_dict(value, preserve_length)
        elif isinstance(value, (list, tuple)):
            return type(value)(self._redact_value(f"{key}[]", item, preserve_length) for item in value)
        
        if self.is_sensitive_key(key):
            if preserve_length and isinstance(value, (str, bytes)) and len(value) > 0:
                return "*" * len(value)
            return self.redaction_placeholder
        
        if isinstance(value, str):
            return self.redact_string(value)
        
        return value


# ============================================================================
# Formatter Classes
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    
    Example output:
        {
            "timestamp": "2026-10-18T10:30:45.123456Z",
            "level": "INFO",
            "logger": "wext_interceptor.webhook.handlers",
            "message": "[my-trigger] Validation PASS so writing response",
            "module": "handlers",
            "function": "handle",
            "line": 42,
            "trigger": "my-trigger"
        }
    """
    
    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = True):
        """
        Initialize JSON formatter.
        
        Args:
            ensure_ascii: Whether to ensure ASCII encoding in JSON output
            sort_keys: Whether to sort keys in JSON output
        """
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
        self._redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry = self._create_base_log_entry(record)
        self._add_extra_fields(log_entry, record)
        self._add_exception_info(log_entry, record)
        
        return json.dumps(
            log_entry,
            default=str,
            ensure_ascii=self.ensure_ascii,
            sort_keys=self.sort_keys
        )
    
    def _create_base_log_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Create the base log entry with standard fields."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
    
    def _add_extra_fields(self, log_entry: Dict[str, Any], record: logging.LogRecord) -> None:
        """Add extra fields from the record while excluding standard fields."""
        for key, value in record.__dict__.items():
            if key not in STANDARD_LOG_FIELDS:
                log_entry[key] = self._redactor._redact_value(key, value)
    
    def _add_exception_info(self, log_entry: Dict[str, Any], record: logging.LogRecord) -> None:
        """Add exception information if present in the record."""
        if record.exc_info:
            exception_str = self.formatException(record.exc_info)
            log_entry["exception"] = self._redactor.redact_string(exception_str)


class TextFormatter(logging.Formatter):
    """
    Text formatter for human-readable logging with optional colors.
    
    Example output:
        [2026-10-18 10:30:45] INFO     wext_interceptor.webhook.handlers:42 - [my-trigger] Validation PASS
    """
    
    def __init__(self, use_colors: bool = True, timestamp_format: Optional[str] = None):
        """
        Initialize text formatter.
        
        Args:
            use_colors: Whether to use ANSI colors in output
            timestamp_format: Custom timestamp format string
        """
        super().__init__()
        self.use_colors = use_colors and self._supports_color()
        self.timestamp_format = timestamp_format or DEFAULT_TIMESTAMP_FORMAT
    
    def _supports_color(self) -> bool:
        """Check if the terminal supports color output."""
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as (optionally colored) text."""
        timestamp = datetime.fromtimestamp(record.created).strftime(self.timestamp_format)
        
        message = (
            f"[{timestamp}] {record.levelname:8} "
            f"{record.name}:{record.lineno} - {record.getMessage()}"
        )
        
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"
        
        if self.use_colors:
            color = Colors.LEVEL_COLORS.get(record.levelname, '')
            message = f"{color}{message}{Colors.RESET}"
        
        return message


# ============================================================================
# Filter Classes
# ============================================================================

class SensitiveDataFilter(logging.Filter):
    """
    Filter that sanitizes secrets in log records.
    
    Redacts the message template, positional arguments and any extra
    fields whose names mark them as sensitive.
    """
    
    def __init__(
        self, 
        redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD,
        preserve_length: bool = False
    ):
        """
        Initialize sensitive data filter.
        
        Args:
            redaction_level: Level of redaction to apply
            preserve_length: Whether to preserve original data length in redaction
        """
        super().__init__()
        
        if isinstance(redaction_level, str):
            redaction_level = RedactionLevel(redaction_level.lower())
        
        self.redactor = SensitiveDataRedactor(redaction_level)
        self.preserve_length = preserve_length
        self.redaction_stats = {
            "records_processed": 0,
            "fields_redacted": 0,
        }
    
    def filter(self, record: logging.LogRecord) -> bool:
        """
        Sanitize sensitive data in the log record.
        
        Args:
            record: The log record to sanitize
            
        Returns:
            Always returns True to allow the record through
        """
        self.redaction_stats["records_processed"] += 1
        
        if isinstance(record.msg, str):
            original_msg = record.msg
            record.msg = self.redactor.redact_string(record.msg)
            if original_msg != record.msg:
                self.redaction_stats["fields_redacted"] += 1
        
        if isinstance(record.args, tuple):
            record.args = tuple(
                self.redactor.redact_string(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        
        for key in list(record.__dict__.keys()):
            if key in STANDARD_LOG_FIELDS:
                continue
            if self.redactor.is_sensitive_key(key):
                original_value = getattr(record, key)
                redacted_value = self.redactor._redact_value(key, original_value, self.preserve_length)
                setattr(record, key, redacted_value)
                if original_value != redacted_value:
                    self.redaction_stats["fields_redacted"] += 1
        
        return True


# ============================================================================
# Setup
# ============================================================================

def validate_log_level(level: str) -> str:
    """
    Validate and normalize log level string.
    
    Raises:
        ValueError: If the log level is not supported
    """
    if not level:
        raise ValueError("Log level cannot be empty")
    
    level_upper = level.upper()
    valid_levels = {log_level.value for log_level in LogLevel}
    
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level: {level}. Valid levels: {', '.join(sorted(valid_levels))}")
    
    return level_upper


def validate_log_format(format_type: str) -> str:
    """
    Validate and normalize log format string.
    
    Raises:
        ValueError: If the log format is not supported
    """
    if not format_type:
        raise ValueError("Log format cannot be empty")
    
    format_lower = format_type.lower()
    valid_formats = {log_format.value for log_format in LogFormat}
    
    if format_lower not in valid_formats:
        raise ValueError(f"Invalid log format: {format_type}. Valid formats: {', '.join(sorted(valid_formats))}")
    
    return format_lower


def setup_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    format_type: Union[str, LogFormat] = LogFormat.TEXT,
    log_file: Optional[str] = None,
    use_colors: Optional[bool] = None,
    sanitize_sensitive_data: bool = True,
    redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD,
) -> logging.Logger:
    """
    Set up logging for the interceptor.
    
    Configures the root logger with a console handler and an optional
    file handler. Console output is JSON or text; files are always JSON.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
        log_file: Optional log file path
        use_colors: Whether to use colors in text output (auto-detected if None)
        sanitize_sensitive_data: Whether to redact secrets and signatures
        redaction_level: Level of sensitive data redaction
        
    Returns:
        Configured root logger
        
    Raises:
        ValueError: If the level or format is not supported
    """
    level_str = level.value if isinstance(level, LogLevel) else str(level)
    format_str = format_type.value if isinstance(format_type, LogFormat) else str(format_type)
    validated_level = validate_log_level(level_str)
    validated_format = validate_log_format(format_str)
    
    numeric_level = getattr(logging, validated_level, logging.INFO)
    
    logger = logging.getLogger()
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    
    filters: List[logging.Filter] = []
    if sanitize_sensitive_data:
        filters.append(SensitiveDataFilter(redaction_level=redaction_level))
    
    if validated_format == LogFormat.JSON.value:
        console_formatter: logging.Formatter = JSONFormatter()
    else:
        console_formatter = TextFormatter(use_colors=use_colors if use_colors is not None else True)
    
    logger.addHandler(_create_handler(logging.StreamHandler(sys.stdout), numeric_level, console_formatter, filters))
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        logger.addHandler(_create_handler(file_handler, numeric_level, JSONFormatter(), filters))
    
    return logger


def _create_handler(
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
    filters: List[logging.Filter]
) -> logging.Handler:
    """Attach level, formatter and filters to a handler."""
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for filter_obj in filters:
        handler.addFilter(filter_obj)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.
    
    Args:
        name: Logger name (typically __name__)
        
    Returns:
        Logger instance
    """
    return logging.getLogger(name)
