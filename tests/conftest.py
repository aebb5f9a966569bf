"""
Configuration for pytest test suite
"""
import json
import os
import sys
from pathlib import Path

import pytest

# Make the package importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables BEFORE importing anything from the package
os.environ.update({
    "LOG_LEVEL": "DEBUG",
    "LOG_FORMAT": "text",
    "WEXT_TRIGGER_NAME": "test-trigger",
    "WEXT_SECRET_NAME": "test-secret",
    "WEXT_SECRET_TOKEN": "s3cret-token",
})

from wext_interceptor.webhook import RawRequest, TriggerSecret, WebhookInterceptor  # noqa: E402

from fixtures import SECRET_TOKEN, github_headers, gitlab_headers  # noqa: E402


@pytest.fixture
def secret():
    """Trigger secret shared by GitHub and GitLab tests."""
    return TriggerSecret.from_data("test-secret", {"secretToken": SECRET_TOKEN, "accessToken": "unused"})


@pytest.fixture
def interceptor():
    return WebhookInterceptor()


@pytest.fixture
def github_request():
    """Factory building a signed GitHub request from a payload dict."""
    def _build(payload, event="push", extra_headers=None, body=None):
        raw_body = body if body is not None else json.dumps(payload).encode("utf-8")
        headers = github_headers(raw_body, event)
        headers.update(extra_headers or {})
        return RawRequest(headers, raw_body)
    return _build


@pytest.fixture
def gitlab_request():
    """Factory building a GitLab request carrying the shared token."""
    def _build(payload, event="Push Hook", extra_headers=None, token=SECRET_TOKEN):
        raw_body = json.dumps(payload).encode("utf-8")
        headers = gitlab_headers(event, token)
        headers.update(extra_headers or {})
        return RawRequest(headers, raw_body)
    return _build
