"""Reconciliation — decide which issues to open or close for a webhook message.

Pure: takes the decoded message, the currently open issues and the receiver
config, and returns the intended actions.  Applying them is the handler's job.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from github_receiver.alerts.models import Alert, WebhookMessage
from github_receiver.core.config import ReceiverConfig
from github_receiver.tracker import Issue

log = structlog.get_logger("github_receiver.reconciler")

# Label that overrides the target repository, on the alert or the whole group.
REPO_LABEL = "repo"


@dataclass(frozen=True)
class CreateAction:
    """Open a new issue tracking a firing alert."""

    repo: str
    title: str
    body: str


@dataclass(frozen=True)
class CloseAction:
    """Close the issue of a resolved alert."""

    issue: Issue


Action = CreateAction | CloseAction


def reconcile(
    message: WebhookMessage, open_issues: list[Issue], config: ReceiverConfig
) -> list[Action]:
    """Compute the create/close actions for every alert in *message*.

    Alerts are handled in order.  An alert matches the first open issue
    whose title equals the alert name.  Within one message the same title
    is created at most once and the same issue is closed at most once.
    """
    planned_titles: set[str] = set()
    actions: list[Action] = []

    for alert in message.alerts:
        name = alert.name
        if not name:
            log.warning("reconciler.alert_without_name", group_key=message.group_key)
            continue
        if name in planned_titles:
            continue

        issue = find_issue(open_issues, name)
        if alert.status == "firing":
            if issue is None:
                actions.append(
                    CreateAction(
                        repo=target_repo(alert, message, config),
                        title=name,
                        body=build_body(alert, config.extra_labels),
                    )
                )
                planned_titles.add(name)
        elif issue is not None and config.auto_close:
            actions.append(CloseAction(issue=issue))
            planned_titles.add(name)

    return actions


def find_issue(issues: list[Issue], title: str) -> Issue | None:
    """First issue with the given title, or None."""
    for issue in issues:
        if issue.title == title:
            return issue
    return None


def target_repo(alert: Alert, message: WebhookMessage, config: ReceiverConfig) -> str:
    """Repository for a new issue: the ``repo`` label if set, else the default."""
    return (
        alert.labels.get(REPO_LABEL)
        or message.common_labels.get(REPO_LABEL)
        or config.default_repo
    )


def build_body(alert: Alert, extra_labels: tuple[str, ...] | list[str] = ()) -> str:
    """Issue body: annotation values sorted by key, then the surfaced labels.

    Surfaced labels follow *extra_labels* order, one ``name: value`` line
    each, separated from the annotations by a blank line.
    """
    lines = [alert.annotations[key] for key in sorted(alert.annotations)]
    surfaced = [f"{name}: {alert.labels[name]}" for name in extra_labels if name in alert.labels]
    if surfaced:
        if lines:
            lines.append("")
        lines.extend(surfaced)
    return "\n".join(lines)
