"""Alertmanager webhook payload (version 4) and its decoder."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from github_receiver.alerts import DecodeError

AlertStatus = Literal["firing", "resolved"]

# Alertmanager sends Go's zero time for an alert that has not ended.
_ZERO_TIME_YEAR = 1


class Alert(BaseModel):
    """A single alert inside a webhook message."""

    model_config = ConfigDict(populate_by_name=True)

    status: AlertStatus
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str | None = None

    @property
    def name(self) -> str:
        """The alert name, i.e. the ``alertname`` label."""
        return self.labels.get("alertname", "")

    @field_validator("ends_at")
    @classmethod
    def _zero_time_is_unset(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.year == _ZERO_TIME_YEAR:
            return None
        return v

    @model_validator(mode="after")
    def _check_end_matches_status(self) -> Alert:
        if self.status == "firing" and self.ends_at is not None:
            raise ValueError("firing alert must not have endsAt")
        if self.status == "resolved" and self.ends_at is None:
            raise ValueError("resolved alert must have endsAt")
        return self


class WebhookMessage(BaseModel):
    """A batch of alerts delivered in one webhook call."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    group_key: str = Field(alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    receiver: str
    status: AlertStatus
    alerts: list[Alert] = Field(default_factory=list)
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")


def decode_message(body: bytes | str) -> WebhookMessage:
    """Parse a JSON webhook body.

    Raises :class:`DecodeError` on malformed JSON or a payload that does
    not have the webhook message shape.
    """
    try:
        return WebhookMessage.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"invalid webhook message: {exc.error_count()} error(s)") from exc
