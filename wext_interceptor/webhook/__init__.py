"""
Webhook interception for GitHub and GitLab deliveries.

This package authenticates webhooks against a trigger's secret, decodes
the provider's event, matches it against the trigger's declared filter
and injects the target branch into the payload.

Main exports:
    - WebhookInterceptor: Runs a request through the whole pipeline
    - RawRequest: Inbound request with a single-use body
    - TriggerSecret: Secret bound to a trigger
    - InterceptResult: Pass/fail result with the augmented payload
    - canonicalize_repository_url: Clone URL normalization
"""

from .models import (
    BRANCH_FIELD,
    Provider,
    EventKind,
    MismatchReason,
    GitHubEventType,
    GitLabEventType,
    DecodedEvent,
    DeclaredFilter,
    ValidationOutcome,
    InterceptResult,
    TriggerSecret,
)
from .canonical import canonicalize_repository_url
from .request import RawRequest
from .signatures import GitHubSignatureVerifier, GitLabTokenVerifier
from .decoders import GitHubEventDecoder, GitLabEventDecoder
from .validators import WebhookEventFilter, declared_filter_from_request, match_filter
from .augment import augment_payload, derive_branch
from .handlers import WebhookInterceptor, PipelineStage, detect_provider

__all__ = [
    # Enums
    "Provider",
    "EventKind",
    "MismatchReason",
    "GitHubEventType",
    "GitLabEventType",
    "PipelineStage",
    # Models
    "BRANCH_FIELD",
    "DecodedEvent",
    "DeclaredFilter",
    "ValidationOutcome",
    "InterceptResult",
    "TriggerSecret",
    "RawRequest",
    # Pipeline components
    "canonicalize_repository_url",
    "GitHubSignatureVerifier",
    "GitLabTokenVerifier",
    "GitHubEventDecoder",
    "GitLabEventDecoder",
    "WebhookEventFilter",
    "declared_filter_from_request",
    "match_filter",
    "augment_payload",
    "derive_branch",
    # Handlers
    "WebhookInterceptor",
    "detect_provider",
]
