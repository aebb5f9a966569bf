"""
Payload augmentation.

Adds the branch a webhook refers to as a top-level
``webhooks-tekton-git-branch`` field, so downstream trigger bindings
can read it without parsing refs themselves.

The payload is re-serialized from its parsed form, so keys, nesting and
values survive but their textual encoding is normalized: numbers are
written the way ``json`` writes them (``1e2`` becomes ``100.0``),
``\\uXXXX`` escapes of printable characters are written as plain UTF-8
and insignificant whitespace is dropped. A payload holding a lone
surrogate escape is written with every non-ASCII character escaped.
"""

import json

from ..utils.exceptions import UnsupportedEventTypeError
from .models import BRANCH_FIELD, DecodedEvent, EventKind


def branch_from_ref(ref: str) -> str:
    """Return the segment after the last ``/`` of a ref (the whole ref if it has none)."""
    return ref.rsplit("/", 1)[-1]


def derive_branch(event: DecodedEvent) -> str:
    """
    Derive the branch name of a decoded event.

    Push events use the pushed ref; pull/merge requests use the source
    (head) branch, never the target.

    Raises:
        UnsupportedEventTypeError: The event kind has no branch
    """
    if event.kind in (EventKind.PUSH, EventKind.PULL_REQUEST):
        return branch_from_ref(event.ref)

    raise UnsupportedEventTypeError(
        "Unsupported event type received for branch augmentation",
        event_kind=event.kind.value,
        event_type=event.event_type,
    )


def augment_payload(event: DecodedEvent) -> bytes:
    """
    Serialize the original event with the derived branch appended.

    Original keys keep their order, nesting and values; the branch is
    added as the last top-level key. A branch key already present in
    the payload is replaced rather than duplicated.

    Returns:
        Compact UTF-8 JSON bytes

    Raises:
        UnsupportedEventTypeError: The event kind has no branch
    """
    branch = derive_branch(event)
    augmented = {key: value for key, value in event.raw.items() if key != BRANCH_FIELD}
    augmented[BRANCH_FIELD] = branch
    try:
        return json.dumps(augmented, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates from \ud800-style escapes have no UTF-8 form
        return json.dumps(augmented, separators=(",", ":")).encode("ascii")
