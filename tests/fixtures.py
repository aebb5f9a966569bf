"""
Sample GitHub and GitLab webhook payloads for tests.

Payloads are trimmed to the fields the interceptor reads plus a few
neighbours, so tests can check that unread fields survive untouched.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional

SECRET_TOKEN = "s3cret-token"

GITHUB_CLONE_URL = "https://github.com/org/repo.git"
GITLAB_CLONE_URL = "https://gitlab.example.com/group/project.git"


def sign(body: bytes, secret: str = SECRET_TOKEN, algorithm: str = "sha256") -> str:
    """Signature header value GitHub would send for a body."""
    digest = hmac.new(secret.encode("utf-8"), body, getattr(hashlib, algorithm)).hexdigest()
    return f"{algorithm}={digest}"


def github_headers(body: bytes, event: str = "push", secret: str = SECRET_TOKEN) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
        "X-Hub-Signature-256": sign(body, secret),
    }


def gitlab_headers(event: str = "Push Hook", token: Optional[str] = SECRET_TOKEN) -> Dict[str, str]:
    headers = {"Content-Type": "application/json", "X-Gitlab-Event": event}
    if token is not None:
        headers["X-Gitlab-Token"] = token
    return headers


def github_push_payload(
    ref: str = "refs/heads/main", clone_url: str = GITHUB_CLONE_URL
) -> Dict[str, Any]:
    return {
        "ref": ref,
        "before": "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
        "after": "0000000000000000000000000000000000000000",
        "repository": {
            "id": 186853002,
            "full_name": "org/repo",
            "clone_url": clone_url,
            "html_url": "https://github.com/org/repo",
        },
        "pusher": {"name": "octocat", "email": "octocat@github.com"},
        "commits": [],
    }


def github_pull_request_payload(
    action: str = "opened",
    head_ref: str = "feature/login",
    base_ref: str = "main",
    clone_url: str = GITHUB_CLONE_URL,
) -> Dict[str, Any]:
    return {
        "action": action,
        "number": 2,
        "pull_request": {
            "id": 279147437,
            "title": "Update the README",
            "head": {"ref": head_ref, "sha": "ec26c3e57ca3a959ca5aad62de7213c562f8c821"},
            "base": {"ref": base_ref, "sha": "f95f852bd8fca8fcc58a9a2d6c842781e32a215e"},
        },
        "repository": {"full_name": "org/repo", "clone_url": clone_url},
    }


def github_issue_comment_payload(clone_url: str = GITHUB_CLONE_URL) -> Dict[str, Any]:
    return {
        "action": "created",
        "issue": {"number": 1, "title": "Spelling error in the README file"},
        "comment": {"id": 492700400, "body": "You are totally right!"},
        "repository": {"full_name": "org/repo", "clone_url": clone_url},
    }


def gitlab_push_payload(
    ref: str = "refs/heads/master", clone_url: str = GITLAB_CLONE_URL
) -> Dict[str, Any]:
    return {
        "object_kind": "push",
        "event_name": "push",
        "before": "95790bf891e76fee5e1747ab589903a6a1f80f22",
        "after": "da1560886d4f094c3e6c9ef40349f7d38b5d27d7",
        "ref": ref,
        "checkout_sha": "da1560886d4f094c3e6c9ef40349f7d38b5d27d7",
        "user_username": "jsmith",
        "project_id": 15,
        "repository": {
            "name": "project",
            "git_http_url": clone_url,
            "git_ssh_url": "git@gitlab.example.com:group/project.git",
        },
        "total_commits_count": 0,
    }


def gitlab_merge_request_payload(
    state: str = "opened",
    source_branch: str = "ms-viewport",
    target_branch: str = "master",
    clone_url: str = GITLAB_CLONE_URL,
) -> Dict[str, Any]:
    return {
        "object_kind": "merge_request",
        "event_type": "merge_request",
        "user": {"id": 1, "name": "Administrator", "username": "root"},
        "object_attributes": {
            "id": 99,
            "iid": 1,
            "target_branch": target_branch,
            "source_branch": source_branch,
            "state": state,
            "action": "open",
            "source": {"name": "project", "git_http_url": clone_url},
            "target": {"name": "project", "git_http_url": "https://gitlab.example.com/group/upstream.git"},
        },
        "repository": {"name": "upstream", "url": "git@gitlab.example.com:group/upstream.git"},
    }


def gitlab_note_payload(clone_url: str = GITLAB_CLONE_URL) -> Dict[str, Any]:
    return {
        "object_kind": "note",
        "project": {"name": "project", "git_http_url": clone_url},
        "object_attributes": {"id": 1244, "note": "This MR needs work.", "noteable_type": "MergeRequest"},
    }
