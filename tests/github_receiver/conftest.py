"""Shared fixtures for receiver tests — no GitHub access needed."""

from __future__ import annotations

from typing import Any

import pytest

from github_receiver.alerts.models import WebhookMessage
from github_receiver.core.config import ReceiverConfig
from github_receiver.tracker import Issue

STARTS_AT = "2017-06-28T01:40:00Z"
ENDS_AT = "2017-06-28T02:46:40Z"
ZERO_TIME = "0001-01-01T00:00:00Z"


def _alert(alertname: str, status: str, **labels: str) -> dict[str, Any]:
    return {
        "status": status,
        "labels": {"dev": "sda3", "instance": "example4", "alertname": alertname, **labels},
        "annotations": {"description": "This is how to handle the alert"},
        "startsAt": STARTS_AT,
        "endsAt": ENDS_AT if status == "resolved" else ZERO_TIME,
        "generatorURL": "http://generator.url/",
    }


def _payload(
    alertname: str = "DiskRunningFull",
    status: str = "firing",
    repo: str = "",
    *,
    alerts: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Webhook payload as Alertmanager sends it, one alert by default."""
    return {
        "version": "4",
        "groupKey": f'{{}}:{{alertname="{alertname}"}}',
        "receiver": "webhook",
        "status": status,
        "alerts": [_alert(alertname, status)] if alerts is None else alerts,
        "groupLabels": {"alertname": alertname},
        "commonLabels": {"alertname": alertname, "repo": repo},
        "externalURL": "http://localhost:9093",
    }


@pytest.fixture
def make_alert():
    return _alert


@pytest.fixture
def make_payload():
    return _payload


@pytest.fixture
def make_message():
    def _make(*args: Any, **kwargs: Any) -> WebhookMessage:
        return WebhookMessage.model_validate(_payload(*args, **kwargs))

    return _make


@pytest.fixture
def config() -> ReceiverConfig:
    return ReceiverConfig(default_repo="default", auto_close=True)


@pytest.fixture
def open_issue() -> Issue:
    return Issue(
        title="DiskRunningFull",
        body="body1",
        repository="acme/default",
        number=7,
        url="https://github.com/acme/default/issues/7",
    )
