"""
Webhook interceptor for GitHub and GitLab triggers.

Authenticates incoming webhooks, matches them against a trigger's
declared repository/event/action filter and surfaces the branch the
event refers to as ``webhooks-tekton-git-branch``.
"""

__version__ = "0.1.0"
