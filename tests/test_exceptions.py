"""
Tests for the interceptor exception hierarchy.
"""

from wext_interceptor.utils.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    InterceptorError,
    UnsupportedEventTypeError,
    WebhookDecodeError,
)


def test_authentication_error_details():
    error = AuthenticationFailedError(
        "GitLab webhook authentication failed", provider="gitlab", header="X-Gitlab-Token", secret_name="s"
    )

    assert isinstance(error, InterceptorError)
    assert error.to_dict() == {
        "error_type": "AuthenticationFailedError",
        "message": "GitLab webhook authentication failed",
        "error_code": "AUTHENTICATION_FAILED",
        "details": {"provider": "gitlab", "header": "X-Gitlab-Token", "secret_name": "s"},
    }


def test_decode_error_keeps_validation_errors():
    errors = [{"field": "ref", "message": "Field required", "type": "missing"}]
    error = WebhookDecodeError("bad push", event_type="push", validation_errors=errors)

    assert error.error_code == "DECODE_ERROR"
    assert error.details["validation_errors"] == errors
    assert str(error) == "bad push"


def test_unsupported_event_and_config_codes():
    assert UnsupportedEventTypeError("x", event_kind="other").error_code == "UNSUPPORTED_EVENT_TYPE"
    assert ConfigurationError("x", config_key="server_port").details == {"config_key": "server_port"}
