"""
Declared filter parsing and matching.

A trigger declares which repository, event types and actions it cares
about through request headers (``Wext-Repository-Url``,
``Wext-Incoming-Event``, ``Wext-Incoming-Actions`` by default). The
matcher decides whether a decoded event satisfies that declaration.

Matching order:
    1. Repository URL (canonicalized on both sides; an empty URL on
       either side never matches)
    2. Event type (raw header value against the trimmed declared entries)
    3. Action (only when actions are declared)

The matcher performs no I/O; callers log the outcome.
"""

from typing import Optional

from ..config.settings import FilterHeaderNames
from .canonical import canonicalize_repository_url
from .models import DecodedEvent, DeclaredFilter, MismatchReason, ValidationOutcome
from .request import RawRequest


def split_entries(value: Optional[str]) -> tuple[str, ...]:
    """
    Split a comma-separated header value into its entries.

    Entries are returned as sent (untrimmed). A missing or blank value
    yields no entries.
    """
    if value is None or not value.strip():
        return ()
    return tuple(value.split(","))


def declared_filter_from_request(
    request: RawRequest, header_names: FilterHeaderNames = FilterHeaderNames()
) -> DeclaredFilter:
    """
    Read a trigger's declared filter from request headers.

    Only the first value of each header is used.
    """
    return DeclaredFilter(
        repository_url=request.header(header_names.repository) or "",
        events=split_entries(request.header(header_names.events)),
        actions=split_entries(request.header(header_names.actions)),
    )


class WebhookEventFilter:
    """
    Matches decoded events against declared filters.

    Event entries are always trimmed. Action entries are trimmed too
    unless ``trim_actions`` is False, which compares them byte-for-byte
    as older filter declarations expect.
    """

    def __init__(self, trim_actions: bool = True):
        """
        Initialize event filter.

        Args:
            trim_actions: Ignore whitespace around declared action entries
        """
        self.trim_actions = trim_actions

    def match(self, event: DecodedEvent, declared: DeclaredFilter) -> ValidationOutcome:
        """
        Decide whether an event satisfies a declared filter.

        Args:
            event: Decoded webhook event
            declared: Trigger's declared filter

        Returns:
            ValidationOutcome; ``reason`` names the first failing check
        """
        found_url = canonicalize_repository_url(event.clone_url)
        wanted_url = canonicalize_repository_url(declared.repository_url)
        if not found_url or not wanted_url or found_url != wanted_url:
            return ValidationOutcome.reject(
                MismatchReason.REPOSITORY_MISMATCH,
                f"repository URLs do not match, got {found_url or '<none>'} "
                f"but wanted {wanted_url or '<none>'}",
            )

        if not declared.events:
            return ValidationOutcome.accept("repository URL and secret payload checked")

        if not any(entry.strip() == event.event_type for entry in declared.events):
            return ValidationOutcome.reject(
                MismatchReason.EVENT_TYPE_MISMATCH,
                f"event type does not match, got {event.event_type} "
                f"but wanted one of {','.join(declared.events)}",
            )

        if not declared.actions:
            return ValidationOutcome.accept("repository URL, secret payload, event type checked")

        for action in declared.actions:
            candidate = action.strip() if self.trim_actions else action
            if candidate == event.action:
                return ValidationOutcome.accept(
                    f"repository URL, secret payload, event type, action:{candidate} checked"
                )

        return ValidationOutcome.reject(
            MismatchReason.ACTION_MISMATCH,
            f"action type does not match, got {event.action} "
            f"but wanted one of {','.join(declared.actions)}",
        )


def match_filter(event: DecodedEvent, declared: DeclaredFilter, trim_actions: bool = True) -> ValidationOutcome:
    """Match an event against a declared filter with a one-off ``WebhookEventFilter``."""
    return WebhookEventFilter(trim_actions=trim_actions).match(event, declared)
