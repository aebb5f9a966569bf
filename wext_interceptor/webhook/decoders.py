"""
Provider event decoding.

Turns a verified body plus the provider's event-type header into a
``DecodedEvent``: the typed envelope, the original JSON object and the
clone URL / action / ref facts the filter and augmenter need.
"""

import json
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..utils.exceptions import WebhookDecodeError
from .models import (
    DecodedEvent,
    EventKind,
    GitHubEventType,
    GitHubOtherEvent,
    GitHubPullRequestEvent,
    GitHubPushEvent,
    GitLabEventType,
    GitLabMergeRequestEvent,
    GitLabOtherEvent,
    GitLabPushEvent,
    Provider,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_json_object(body: bytes, event_type: str) -> dict[str, Any]:
    """
    Parse a payload that must be a JSON object.

    Key order is preserved, which the augmenter relies on.

    Raises:
        WebhookDecodeError: Invalid UTF-8, invalid JSON or a non-object document
    """
    excerpt = body[:200].decode("utf-8", errors="replace")
    try:
        document = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise WebhookDecodeError(
            f"Invalid UTF-8 encoding: {e}", event_type=event_type, payload_excerpt=excerpt
        ) from e
    except json.JSONDecodeError as e:
        raise WebhookDecodeError(
            f"Invalid JSON payload: {e}", event_type=event_type, payload_excerpt=excerpt
        ) from e

    if not isinstance(document, dict):
        raise WebhookDecodeError(
            f"Expected a JSON object, got {type(document).__name__}",
            event_type=event_type,
            payload_excerpt=excerpt,
        )
    return document


def parse_envelope(model: type[ModelT], document: dict[str, Any], event_type: str) -> ModelT:
    """
    Validate a JSON object against a provider envelope model.

    Raises:
        WebhookDecodeError: A field the event variant requires is absent or invalid
    """
    try:
        return model.model_validate(document)
    except ValidationError as e:
        validation_errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise WebhookDecodeError(
            f"Invalid {event_type} payload schema",
            event_type=event_type,
            validation_errors=validation_errors,
        ) from e


class GitHubEventDecoder:
    """Decodes GitHub deliveries keyed on the X-GitHub-Event header."""

    EVENT_HEADER = "X-GitHub-Event"
    DELIVERY_HEADER = "X-GitHub-Delivery"

    def decode(self, event_type: str, body: bytes, delivery_id: Optional[str] = None) -> DecodedEvent:
        """
        Decode a verified GitHub payload.

        Args:
            event_type: X-GitHub-Event header value
            body: Verified JSON payload
            delivery_id: X-GitHub-Delivery header value, for log correlation

        Raises:
            WebhookDecodeError: Unknown event type or malformed payload
        """
        try:
            known_type = GitHubEventType(event_type)
        except ValueError:
            raise WebhookDecodeError(f"Unrecognized GitHub event type: {event_type!r}", event_type=event_type)

        document = load_json_object(body, event_type)

        if known_type == GitHubEventType.PUSH:
            push = parse_envelope(GitHubPushEvent, document, event_type)
            return DecodedEvent(
                provider=Provider.GITHUB,
                kind=EventKind.PUSH,
                event_type=event_type,
                clone_url=self._clone_url(push.repository),
                action="",
                ref=push.ref,
                payload=push,
                raw=document,
                delivery_id=delivery_id,
            )

        if known_type == GitHubEventType.PULL_REQUEST:
            pull = parse_envelope(GitHubPullRequestEvent, document, event_type)
            return DecodedEvent(
                provider=Provider.GITHUB,
                kind=EventKind.PULL_REQUEST,
                event_type=event_type,
                clone_url=self._clone_url(pull.repository),
                action=pull.action,
                ref=pull.pull_request.head.ref,
                payload=pull,
                raw=document,
                delivery_id=delivery_id,
            )

        other = parse_envelope(GitHubOtherEvent, document, event_type)
        return DecodedEvent(
            provider=Provider.GITHUB,
            kind=EventKind.OTHER,
            event_type=event_type,
            clone_url=self._clone_url(other.repository),
            action=other.action or "",
            ref="",
            payload=other,
            raw=document,
            delivery_id=delivery_id,
        )

    @staticmethod
    def _clone_url(repository) -> str:
        return (repository.clone_url if repository else None) or ""


class GitLabEventDecoder:
    """Decodes GitLab deliveries keyed on the X-Gitlab-Event header."""

    EVENT_HEADER = "X-Gitlab-Event"

    def decode(self, event_type: str, body: bytes) -> DecodedEvent:
        """
        Decode a verified GitLab payload.

        Push events are identified by ``checkout_sha`` and merge requests
        by ``object_attributes.id`` in ``delivery_id``.

        Raises:
            WebhookDecodeError: Unknown event type or malformed payload
        """
        try:
            known_type = GitLabEventType(event_type)
        except ValueError:
            raise WebhookDecodeError(f"Unrecognized GitLab event type: {event_type!r}", event_type=event_type)

        document = load_json_object(body, event_type)

        if known_type == GitLabEventType.PUSH:
            push = parse_envelope(GitLabPushEvent, document, event_type)
            return DecodedEvent(
                provider=Provider.GITLAB,
                kind=EventKind.PUSH,
                event_type=event_type,
                clone_url=self._clone_url(push.repository),
                action="",
                ref=push.ref,
                payload=push,
                raw=document,
                delivery_id=push.checkout_sha,
            )

        if known_type == GitLabEventType.MERGE_REQUEST:
            merge = parse_envelope(GitLabMergeRequestEvent, document, event_type)
            attributes = merge.object_attributes
            return DecodedEvent(
                provider=Provider.GITLAB,
                kind=EventKind.PULL_REQUEST,
                event_type=event_type,
                clone_url=self._clone_url(attributes.source),
                action=attributes.state,
                ref=attributes.source_branch,
                payload=merge,
                raw=document,
                delivery_id=str(attributes.id) if attributes.id is not None else None,
            )

        other = parse_envelope(GitLabOtherEvent, document, event_type)
        action = (other.object_attributes or {}).get("action")
        return DecodedEvent(
            provider=Provider.GITLAB,
            kind=EventKind.OTHER,
            event_type=event_type,
            clone_url=self._clone_url(other.repository) or self._clone_url(other.project),
            action=action if isinstance(action, str) else "",
            ref="",
            payload=other,
            raw=document,
        )

    @staticmethod
    def _clone_url(repository) -> str:
        return (repository.git_http_url if repository else None) or ""
