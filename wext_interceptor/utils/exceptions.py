"""
Custom exception classes for the webhook interceptor.

Provides specific exception types for the terminal failures of the
validation pipeline, each with a machine-readable error code and
structured details for logging.
"""

from typing import Optional, Dict, Any


class InterceptorError(Exception):
    """
    Base exception for the webhook interceptor.
    
    All custom exceptions should inherit from this class.
    """
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.
        
        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(InterceptorError):
    """
    Raised when there's a configuration error.
    
    This includes invalid environment values, unsupported
    log levels or formats, out-of-range ports, etc.
    """
    
    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None
    ):
        """Initialize configuration error."""
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = config_value
        
        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details=details
        )


class AuthenticationFailedError(InterceptorError):
    """
    Raised when a webhook cannot be authenticated.
    
    This includes a missing signature or token header, a malformed
    signature header, or a signature/token that does not match the
    trigger's secret.
    """
    
    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        header: Optional[str] = None,
        secret_name: Optional[str] = None
    ):
        """Initialize authentication error."""
        details = {}
        if provider:
            details["provider"] = provider
        if header:
            details["header"] = header
        if secret_name:
            details["secret_name"] = secret_name
        
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_FAILED",
            details=details
        )


class WebhookDecodeError(InterceptorError):
    """
    Raised when a verified body cannot be decoded into an event.
    
    This includes malformed JSON, an unrecognized event-type header
    and a field that the matched event variant requires but is absent.
    """
    
    def __init__(
        self,
        message: str,
        event_type: Optional[str] = None,
        payload_excerpt: Optional[str] = None,
        validation_errors: Optional[list] = None
    ):
        """Initialize decode error."""
        details: Dict[str, Any] = {}
        if event_type:
            details["event_type"] = event_type
        if payload_excerpt:
            details["payload_excerpt"] = payload_excerpt
        if validation_errors:
            details["validation_errors"] = validation_errors
        
        super().__init__(
            message=message,
            error_code="DECODE_ERROR",
            details=details
        )


class UnsupportedEventTypeError(InterceptorError):
    """
    Raised when a decoded event has no branch augmentation.
    
    Indicates that the decoder and augmenter event tables are out of
    sync; it is reported as an internal error.
    """
    
    def __init__(
        self,
        message: str,
        event_kind: Optional[str] = None,
        event_type: Optional[str] = None
    ):
        """Initialize unsupported event type error."""
        details = {}
        if event_kind:
            details["event_kind"] = event_kind
        if event_type:
            details["event_type"] = event_type
        
        super().__init__(
            message=message,
            error_code="UNSUPPORTED_EVENT_TYPE",
            details=details
        )


class RequestBodyError(InterceptorError):
    """
    Raised when the request body cannot be consumed.
    
    The body stream is single-use: a second read, or a failure while
    reading it (client disconnect), ends up here.
    """
    
    def __init__(
        self,
        message: str,
        reason: Optional[str] = None
    ):
        """Initialize request body error."""
        details = {}
        if reason:
            details["reason"] = reason
        
        super().__init__(
            message=message,
            error_code="REQUEST_BODY_ERROR",
            details=details
        )
