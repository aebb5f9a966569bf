"""
Models for GitHub and GitLab webhook payloads and pipeline results.

Provider envelopes are Pydantic models that validate only the fields
the interceptor reads and keep everything else (``extra = "allow"``).
The original JSON object is carried separately on ``DecodedEvent`` so
the augmented payload reproduces it verbatim.

GitHub webhook documentation:
https://docs.github.com/en/webhooks/webhook-events-and-payloads
GitLab webhook documentation:
https://docs.gitlab.com/ee/user/project/integrations/webhooks.html
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..utils.exceptions import ConfigurationError

# Top-level key injected into every augmented payload
BRANCH_FIELD = "webhooks-tekton-git-branch"


class Provider(str, Enum):
    """Source-control hosting providers the interceptor understands."""

    GITHUB = "github"
    GITLAB = "gitlab"


class EventKind(str, Enum):
    """
    Provider-independent event family.

    Selects the branch derivation in the payload augmenter.
    """

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    OTHER = "other"


class MismatchReason(str, Enum):
    """Why a declared filter rejected an event."""

    REPOSITORY_MISMATCH = "RepositoryMismatch"
    EVENT_TYPE_MISMATCH = "EventTypeMismatch"
    ACTION_MISMATCH = "ActionMismatch"


class GitLabEventType(str, Enum):
    """
    GitLab webhook event types.

    These correspond to the X-Gitlab-Event header values.
    """

    MERGE_REQUEST = "Merge Request Hook"
    PUSH = "Push Hook"
    TAG_PUSH = "Tag Push Hook"
    ISSUE = "Issue Hook"
    CONFIDENTIAL_ISSUE = "Confidential Issue Hook"
    NOTE = "Note Hook"
    CONFIDENTIAL_NOTE = "Confidential Note Hook"
    PIPELINE = "Pipeline Hook"
    JOB = "Job Hook"
    WIKI_PAGE = "Wiki Page Hook"
    DEPLOYMENT = "Deployment Hook"
    RELEASE = "Release Hook"
    SYSTEM = "System Hook"


class GitHubEventType(str, Enum):
    """
    GitHub webhook event types.

    These correspond to the X-GitHub-Event header values.
    """

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    ISSUE_COMMENT = "issue_comment"
    ISSUES = "issues"
    CREATE = "create"
    DELETE = "delete"
    PING = "ping"
    RELEASE = "release"
    STATUS = "status"
    CHECK_RUN = "check_run"
    CHECK_SUITE = "check_suite"
    COMMIT_COMMENT = "commit_comment"
    DEPLOYMENT = "deployment"
    DEPLOYMENT_STATUS = "deployment_status"
    FORK = "fork"
    WATCH = "watch"
    STAR = "star"
    WORKFLOW_RUN = "workflow_run"
    WORKFLOW_JOB = "workflow_job"


# ============================================================================
# GitHub envelopes
# ============================================================================

class GitHubRepository(BaseModel):
    """Repository object in GitHub webhook payloads."""

    clone_url: Optional[str] = Field(None, description="HTTPS clone URL")
    full_name: Optional[str] = Field(None, description="owner/name")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitHubPushEvent(BaseModel):
    """GitHub ``push`` webhook payload."""

    ref: str = Field(..., description="Full ref name (refs/heads/branch)")
    repository: Optional[GitHubRepository] = Field(None, description="Pushed repository")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitHubPullRequestBranch(BaseModel):
    """Head or base side of a GitHub pull request."""

    ref: str = Field(..., description="Branch ref")
    sha: Optional[str] = Field(None, description="Commit SHA")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitHubPullRequest(BaseModel):
    """Pull request object in GitHub pull request payloads."""

    head: GitHubPullRequestBranch = Field(..., description="Branch proposing the change")
    base: Optional[GitHubPullRequestBranch] = Field(None, description="Target branch")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitHubPullRequestEvent(BaseModel):
    """GitHub ``pull_request`` webhook payload."""

    action: str = Field(..., description="opened, closed, synchronize, ...")
    pull_request: GitHubPullRequest = Field(..., description="Pull request details")
    repository: Optional[GitHubRepository] = Field(None, description="Target repository")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitHubOtherEvent(BaseModel):
    """Any other recognised GitHub event; only the common fields are read."""

    action: Optional[str] = Field(None, description="Event action, if the event has one")
    repository: Optional[GitHubRepository] = Field(None, description="Repository")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


# ============================================================================
# GitLab envelopes
# ============================================================================

class GitLabRepository(BaseModel):
    """Repository/project object in GitLab webhook payloads."""

    name: Optional[str] = Field(None, description="Repository name")
    git_http_url: Optional[str] = Field(None, description="Git HTTP(S) URL")
    git_ssh_url: Optional[str] = Field(None, description="Git SSH URL")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitLabPushEvent(BaseModel):
    """GitLab ``Push Hook`` webhook payload."""

    object_kind: Optional[str] = Field(None, description="Event type (always 'push')")
    ref: str = Field(..., description="Full ref name (refs/heads/branch)")
    checkout_sha: Optional[str] = Field(None, description="SHA to checkout")
    repository: Optional[GitLabRepository] = Field(None, description="Repository information")

    @field_validator("object_kind")
    @classmethod
    def validate_object_kind(cls, v: Optional[str]) -> Optional[str]:
        """Validate that object_kind, when sent, is 'push'."""
        if v is not None and v != "push":
            raise ValueError(f"Expected object_kind 'push', got '{v}'")
        return v

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitLabMergeRequestAttributes(BaseModel):
    """``object_attributes`` of a GitLab merge request payload."""

    id: Optional[int] = Field(None, description="MR database ID")
    state: str = Field(..., description="MR state (opened, closed, locked, merged)")
    source_branch: str = Field(..., description="Source branch name")
    target_branch: Optional[str] = Field(None, description="Target branch name")
    action: Optional[str] = Field(None, description="open, update, merge, ...")
    source: Optional[GitLabRepository] = Field(None, description="Source project repository")
    target: Optional[GitLabRepository] = Field(None, description="Target project repository")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitLabMergeRequestEvent(BaseModel):
    """GitLab ``Merge Request Hook`` webhook payload."""

    object_kind: Optional[str] = Field(None, description="Event type (always 'merge_request')")
    object_attributes: GitLabMergeRequestAttributes = Field(..., description="Merge request details")
    repository: Optional[GitLabRepository] = Field(None, description="Target repository")

    @field_validator("object_kind")
    @classmethod
    def validate_object_kind(cls, v: Optional[str]) -> Optional[str]:
        """Validate that object_kind, when sent, is 'merge_request'."""
        if v is not None and v != "merge_request":
            raise ValueError(f"Expected object_kind 'merge_request', got '{v}'")
        return v

    class Config:
        """Pydantic configuration."""

        extra = "allow"


class GitLabOtherEvent(BaseModel):
    """Any other recognised GitLab hook; only the common fields are read."""

    object_kind: Optional[str] = Field(None, description="Event type")
    project: Optional[GitLabRepository] = Field(None, description="Project details")
    repository: Optional[GitLabRepository] = Field(None, description="Repository information")
    object_attributes: Optional[dict[str, Any]] = Field(None, description="Event attributes")

    class Config:
        """Pydantic configuration."""

        extra = "allow"


ProviderEvent = Union[
    GitHubPushEvent,
    GitHubPullRequestEvent,
    GitHubOtherEvent,
    GitLabPushEvent,
    GitLabMergeRequestEvent,
    GitLabOtherEvent,
]


# ============================================================================
# Pipeline values
# ============================================================================

@dataclass(frozen=True)
class TriggerSecret:
    """
    Secret bound to a trigger.

    ``secret_token`` is the HMAC key (GitHub) or shared token (GitLab).
    ``access_token`` is carried for the host system and never read here.
    """

    name: str
    secret_token: bytes
    access_token: Optional[bytes] = None

    @classmethod
    def from_data(cls, name: str, data: Mapping[str, Union[bytes, str]]) -> "TriggerSecret":
        """Build a secret from a key/value data mapping (``secretToken``, ``accessToken``)."""
        if "secretToken" not in data:
            raise ConfigurationError(
                f"Secret {name} has no secretToken", config_key="secretToken"
            )

        def as_bytes(value: Union[bytes, str]) -> bytes:
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)

        access_token = data.get("accessToken")
        return cls(
            name=name,
            secret_token=as_bytes(data["secretToken"]),
            access_token=as_bytes(access_token) if access_token is not None else None,
        )

    def __repr__(self) -> str:
        return f"TriggerSecret(name={self.name!r})"


@dataclass(frozen=True)
class DecodedEvent:
    """
    A verified webhook decoded into the facts the filter needs.

    ``event_type`` is the raw event-type header value, ``action`` is
    empty for push events, ``ref`` is the ref the branch is derived
    from and ``raw`` is the original JSON object in received key order.
    """

    provider: Provider
    kind: EventKind
    event_type: str
    clone_url: str
    action: str
    ref: str
    payload: ProviderEvent
    raw: dict[str, Any] = field(compare=False)
    delivery_id: Optional[str] = None


@dataclass(frozen=True)
class DeclaredFilter:
    """
    Repository/event/action constraints a trigger declares.

    ``events`` and ``actions`` hold the comma-split header entries as
    sent; an empty ``events`` means no event restriction and an empty
    ``actions`` means any action.
    """

    repository_url: str
    events: tuple[str, ...] = ()
    actions: tuple[str, ...] = ()


class ValidationOutcome(BaseModel):
    """Result of matching a decoded event against a declared filter."""

    passed: bool = Field(..., description="Whether the filter is satisfied")
    reason: Optional[MismatchReason] = Field(None, description="Why the filter rejected the event")
    detail: str = Field("", description="Values that were compared")

    @classmethod
    def accept(cls, detail: str = "") -> "ValidationOutcome":
        return cls(passed=True, detail=detail)

    @classmethod
    def reject(cls, reason: MismatchReason, detail: str = "") -> "ValidationOutcome":
        return cls(passed=False, reason=reason, detail=detail)

    class Config:
        """Pydantic configuration."""

        frozen = True


class InterceptResult(BaseModel):
    """
    Result of running a webhook through the interceptor.

    ``payload`` is set only when ``passed`` is true; a filter rejection
    carries ``reason`` and ``detail`` instead.
    """

    passed: bool = Field(..., description="Whether the trigger applies to this event")
    provider: Provider = Field(..., description="Provider the request was handled as")
    event_type: str = Field(..., description="Raw event-type header value")
    reason: Optional[MismatchReason] = Field(None, description="Filter rejection reason")
    detail: str = Field("", description="Filter comparison detail")
    payload: Optional[bytes] = Field(None, description="Augmented JSON payload (UTF-8)")

    class Config:
        """Pydantic configuration."""

        frozen = True
