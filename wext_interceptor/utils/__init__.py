"""
Utilities module for the webhook interceptor.
"""

from .logger import setup_logging, get_logger, SensitiveDataFilter, SensitiveDataRedactor, RedactionLevel
from .exceptions import (
    InterceptorError,
    ConfigurationError,
    AuthenticationFailedError,
    WebhookDecodeError,
    UnsupportedEventTypeError,
    RequestBodyError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "SensitiveDataFilter",
    "SensitiveDataRedactor",
    "RedactionLevel",
    "InterceptorError",
    "ConfigurationError",
    "AuthenticationFailedError",
    "WebhookDecodeError",
    "UnsupportedEventTypeError",
    "RequestBodyError",
]
