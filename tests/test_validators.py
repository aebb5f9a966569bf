"""
Tests for declared filter parsing and matching.
"""

import json

import pytest

from wext_interceptor.config.settings import FilterHeaderNames
from wext_interceptor.webhook.decoders import GitHubEventDecoder, GitLabEventDecoder
from wext_interceptor.webhook.models import DeclaredFilter, MismatchReason
from wext_interceptor.webhook.request import RawRequest
from wext_interceptor.webhook.validators import (
    WebhookEventFilter,
    declared_filter_from_request,
    match_filter,
    split_entries,
)

from fixtures import (
    github_issue_comment_payload,
    github_pull_request_payload,
    github_push_payload,
    gitlab_merge_request_payload,
)

REPO = "github.com/org/repo"


@pytest.fixture
def push_event():
    return GitHubEventDecoder().decode("push", json.dumps(github_push_payload()).encode())


@pytest.fixture
def pull_event():
    payload = github_pull_request_payload(action="opened")
    return GitHubEventDecoder().decode("pull_request", json.dumps(payload).encode())


@pytest.fixture
def comment_event():
    return GitHubEventDecoder().decode("issue_comment", json.dumps(github_issue_comment_payload()).encode())


class TestSplitEntries:
    """Comma-separated header values."""

    @pytest.mark.parametrize("value,expected", [
        (None, ()),
        ("", ()),
        ("   ", ()),
        ("push", ("push",)),
        ("push,pull_request", ("push", "pull_request")),
        ("push, pull_request", ("push", " pull_request")),
    ])
    def test_split_entries(self, value, expected):
        assert split_entries(value) == expected


class TestDeclaredFilterFromRequest:
    """Reading the declared filter from request headers."""

    def test_default_header_names(self):
        request = RawRequest(
            {
                "Wext-Repository-Url": "https://github.com/org/repo",
                "Wext-Incoming-Event": "push,pull_request",
                "Wext-Incoming-Actions": "opened,reopened",
            },
            b"{}",
        )

        assert declared_filter_from_request(request) == DeclaredFilter(
            repository_url="https://github.com/org/repo",
            events=("push", "pull_request"),
            actions=("opened", "reopened"),
        )

    def test_missing_headers(self):
        declared = declared_filter_from_request(RawRequest({}, b"{}"))
        assert declared == DeclaredFilter(repository_url="")

    def test_custom_header_names(self):
        names = FilterHeaderNames(repository="X-Repo", events="X-Events", actions="X-Actions")
        request = RawRequest({"X-Repo": REPO, "X-Events": "push", "Wext-Incoming-Event": "ignored"}, b"{}")

        declared = declared_filter_from_request(request, names)

        assert declared.repository_url == REPO
        assert declared.events == ("push",)
        assert declared.actions == ()

    def test_only_first_header_value_is_used(self):
        request = RawRequest(
            [("Wext-Repository-Url", REPO), ("Wext-Incoming-Event", "push"), ("Wext-Incoming-Event", "pull_request")],
            b"{}",
        )
        assert declared_filter_from_request(request).events == ("push",)


class TestWebhookEventFilter:
    """Matching order and tie-breaks."""

    def test_repository_mismatch_is_checked_first(self, push_event):
        declared = DeclaredFilter(repository_url="github.com/org/other", events=("issues",), actions=("x",))

        outcome = match_filter(push_event, declared)

        assert not outcome.passed
        assert outcome.reason == MismatchReason.REPOSITORY_MISMATCH
        assert "got github.com/org/repo but wanted github.com/org/other" in outcome.detail

    @pytest.mark.parametrize("clone_url,wanted", [
        ("https://github.com/org/repo.git", ""),
        ("", ""),
        ("", "github.com/org/repo"),
        ("https://github.com/org/repo.git", "https://"),
    ])
    def test_empty_repository_urls_never_match(self, clone_url, wanted):
        payload = github_push_payload(clone_url=clone_url)
        event = GitHubEventDecoder().decode("push", json.dumps(payload).encode())

        outcome = match_filter(event, DeclaredFilter(repository_url=wanted))

        assert not outcome.passed
        assert outcome.reason == MismatchReason.REPOSITORY_MISMATCH
        assert "<none>" in outcome.detail

    @pytest.mark.parametrize("wanted", [
        "github.com/org/repo",
        "https://github.com/org/repo.git",
        "HTTP://GitHub.com/Org/Repo",
    ])
    def test_repository_spellings_match(self, push_event, wanted):
        assert match_filter(push_event, DeclaredFilter(repository_url=wanted)).passed

    def test_empty_events_pass_regardless_of_event_and_action(self, comment_event):
        declared = DeclaredFilter(repository_url=REPO, actions=("closed",))
        outcome = match_filter(comment_event, declared)

        assert outcome.passed
        assert outcome.reason is None

    def test_event_type_mismatch(self, comment_event):
        declared = DeclaredFilter(repository_url=REPO, events=("push", "pull_request"))

        outcome = match_filter(comment_event, declared)

        assert not outcome.passed
        assert outcome.reason == MismatchReason.EVENT_TYPE_MISMATCH
        assert "got issue_comment but wanted one of push,pull_request" in outcome.detail

    def test_event_entries_are_trimmed(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("push", " pull_request "))
        assert match_filter(pull_event, declared).passed

    def test_event_type_match_is_case_sensitive(self, push_event):
        declared = DeclaredFilter(repository_url=REPO, events=("Push",))
        assert match_filter(push_event, declared).reason == MismatchReason.EVENT_TYPE_MISMATCH

    def test_event_match_without_actions_passes(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",))
        assert match_filter(pull_event, declared).passed

    def test_action_match(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",), actions=("closed", "opened"))

        outcome = match_filter(pull_event, declared)

        assert outcome.passed
        assert "action:opened" in outcome.detail

    def test_action_mismatch(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",), actions=("closed", "reopened"))

        outcome = match_filter(pull_event, declared)

        assert not outcome.passed
        assert outcome.reason == MismatchReason.ACTION_MISMATCH
        assert "got opened but wanted one of closed,reopened" in outcome.detail

    def test_push_events_have_no_action(self, push_event):
        declared = DeclaredFilter(repository_url=REPO, events=("push",), actions=("opened",))
        assert match_filter(push_event, declared).reason == MismatchReason.ACTION_MISMATCH

    def test_action_entries_trimmed_by_default(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",), actions=("closed", " opened"))
        assert WebhookEventFilter().match(pull_event, declared).passed

    def test_untrimmed_action_entries(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",), actions=("closed", " opened"))

        outcome = WebhookEventFilter(trim_actions=False).match(pull_event, declared)

        assert outcome.reason == MismatchReason.ACTION_MISMATCH

    def test_gitlab_merge_request_state_is_the_action(self):
        payload = gitlab_merge_request_payload(state="merged")
        event = GitLabEventDecoder().decode("Merge Request Hook", json.dumps(payload).encode())
        declared = DeclaredFilter(
            repository_url="gitlab.example.com/group/project",
            events=("Merge Request Hook",),
            actions=("merged",),
        )

        assert match_filter(event, declared).passed

    def test_matching_is_pure(self, pull_event):
        declared = DeclaredFilter(repository_url=REPO, events=("pull_request",), actions=("opened",))
        event_filter = WebhookEventFilter()

        assert event_filter.match(pull_event, declared) == event_filter.match(pull_event, declared)
