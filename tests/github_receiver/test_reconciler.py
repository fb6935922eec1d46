"""Tests for the reconciliation decision table (pure, no tracker)."""

from __future__ import annotations

import pytest

from github_receiver.alerts.models import Alert
from github_receiver.alerts.reconciler import (
    CloseAction,
    CreateAction,
    build_body,
    find_issue,
    reconcile,
    target_repo,
)
from github_receiver.core.config import ReceiverConfig
from github_receiver.tracker import Issue

# ── TestDecisionTable ─────────────────────────────────────────────────────


class TestDecisionTable:
    def test_firing_without_issue_creates(self, make_message, config):
        actions = reconcile(make_message(status="firing"), [], config)
        assert len(actions) == 1
        action = actions[0]
        assert isinstance(action, CreateAction)
        assert action.title == "DiskRunningFull"
        assert action.repo == "default"
        assert action.body == "This is how to handle the alert"

    def test_firing_with_issue_is_ignored(self, make_message, config, open_issue):
        assert reconcile(make_message(status="firing"), [open_issue], config) == []

    def test_resolved_with_issue_closes(self, make_message, config, open_issue):
        actions = reconcile(make_message(status="resolved"), [open_issue], config)
        assert actions == [CloseAction(issue=open_issue)]

    @pytest.mark.parametrize("matching", [False, True])
    def test_resolved_without_auto_close_is_ignored(self, make_message, open_issue, matching):
        config = ReceiverConfig(default_repo="default", auto_close=False)
        open_issues = [open_issue] if matching else []
        assert reconcile(make_message(status="resolved"), open_issues, config) == []

    def test_resolved_without_issue_is_ignored(self, make_message, config):
        other = Issue(title="HighLoad", number=1, repository="acme/default")
        assert reconcile(make_message(status="resolved"), [other], config) == []

    def test_zero_alerts(self, make_message, config, open_issue):
        assert reconcile(make_message(alerts=[]), [open_issue], config) == []

    def test_title_match_is_exact(self, make_message, config):
        issues = [Issue(title="diskrunningfull"), Issue(title="DiskRunningFull (old)")]
        actions = reconcile(make_message(status="firing"), issues, config)
        assert [a.title for a in actions] == ["DiskRunningFull"]


# ── TestBatch ─────────────────────────────────────────────────────────────


class TestBatch:
    def test_alerts_processed_in_order(self, make_message, make_alert, config, open_issue):
        msg = make_message(
            alerts=[
                make_alert("HighLoad", "firing"),
                make_alert("DiskRunningFull", "resolved"),
                make_alert("NodeDown", "firing"),
            ]
        )
        actions = reconcile(msg, [open_issue], config)
        assert [type(a) for a in actions] == [CreateAction, CloseAction, CreateAction]
        assert actions[0].title == "HighLoad"
        assert actions[1].issue == open_issue
        assert actions[2].title == "NodeDown"

    def test_same_name_created_once(self, make_message, make_alert, config):
        msg = make_message(
            alerts=[
                make_alert("DiskRunningFull", "firing", instance="a"),
                make_alert("DiskRunningFull", "firing", instance="b"),
            ]
        )
        actions = reconcile(msg, [], config)
        assert len(actions) == 1
        assert actions[0].title == "DiskRunningFull"

    def test_same_issue_closed_once(self, make_message, make_alert, config, open_issue):
        msg = make_message(
            status="resolved",
            alerts=[
                make_alert("DiskRunningFull", "resolved", instance="a"),
                make_alert("DiskRunningFull", "resolved", instance="b"),
            ],
        )
        assert reconcile(msg, [open_issue], config) == [CloseAction(issue=open_issue)]

    def test_resolved_instance_closes_despite_firing_sibling(
        self, make_message, make_alert, config, open_issue
    ):
        msg = make_message(
            alerts=[
                make_alert("DiskRunningFull", "resolved", instance="a"),
                make_alert("DiskRunningFull", "firing", instance="b"),
            ]
        )
        assert reconcile(msg, [open_issue], config) == [CloseAction(issue=open_issue)]

    def test_duplicate_issues_first_match_closed(self, make_message, config):
        first = Issue(title="DiskRunningFull", number=1, repository="acme/a")
        second = Issue(title="DiskRunningFull", number=2, repository="acme/b")
        actions = reconcile(make_message(status="resolved"), [first, second], config)
        assert actions == [CloseAction(issue=first)]

    def test_alert_without_name_skipped(self, make_message, make_alert, config):
        nameless = make_alert("X", "firing")
        del nameless["labels"]["alertname"]
        msg = make_message(alerts=[nameless, make_alert("HighLoad", "firing")])
        actions = reconcile(msg, [], config)
        assert [a.title for a in actions] == ["HighLoad"]


# ── TestTargetRepo ────────────────────────────────────────────────────────


class TestTargetRepo:
    def test_default(self, make_message, config):
        msg = make_message()
        assert target_repo(msg.alerts[0], msg, config) == "default"

    def test_common_label(self, make_message, config):
        msg = make_message(repo="custom-repo")
        assert target_repo(msg.alerts[0], msg, config) == "custom-repo"
        assert reconcile(msg, [], config)[0].repo == "custom-repo"

    def test_alert_label_wins(self, make_message, make_alert, config):
        msg = make_message(repo="group-repo", alerts=[make_alert("X", "firing", repo="alert-repo")])
        assert target_repo(msg.alerts[0], msg, config) == "alert-repo"

    def test_empty_label_falls_back(self, make_message, make_alert, config):
        msg = make_message(repo="", alerts=[make_alert("X", "firing", repo="")])
        assert target_repo(msg.alerts[0], msg, config) == "default"


# ── TestBuildBody ─────────────────────────────────────────────────────────


def _alert(**kwargs) -> Alert:
    data = {"status": "firing", "startsAt": "2024-01-01T00:00:00Z"}
    data.update(kwargs)
    return Alert.model_validate(data)


class TestBuildBody:
    def test_annotations_sorted_by_key(self):
        alert = _alert(
            labels={"alertname": "X"},
            annotations={"summary": "disk full", "description": "clean /var", "runbook": "http://rb"},
        )
        assert build_body(alert) == "clean /var\nhttp://rb\ndisk full"

    def test_extra_labels_appended_in_config_order(self):
        alert = _alert(
            labels={"alertname": "X", "severity": "critical", "instance": "db1", "job": "node"},
            annotations={"description": "clean /var"},
        )
        body = build_body(alert, ("severity", "missing", "instance"))
        assert body == "clean /var\n\nseverity: critical\ninstance: db1"

    def test_only_labels(self):
        alert = _alert(labels={"alertname": "X", "severity": "page"})
        assert build_body(alert, ["severity"]) == "severity: page"

    def test_empty(self):
        assert build_body(_alert(labels={"alertname": "X"}), ["severity"]) == ""

    def test_deterministic(self):
        a = _alert(labels={"alertname": "X"}, annotations={"b": "2", "a": "1"})
        b = _alert(labels={"alertname": "X"}, annotations={"a": "1", "b": "2"})
        assert build_body(a) == build_body(b)

    def test_create_action_uses_config_extra_labels(self, make_message):
        config = ReceiverConfig(default_repo="default", extra_labels=("instance", "dev"))
        actions = reconcile(make_message(), [], config)
        assert actions[0].body == (
            "This is how to handle the alert\n\ninstance: example4\ndev: sda3"
        )


def test_find_issue():
    issues = [Issue(title="A", number=1), Issue(title="B", number=2), Issue(title="B", number=3)]
    assert find_issue(issues, "B").number == 2
    assert find_issue(issues, "C") is None
    assert find_issue([], "A") is None
