"""Receiver configuration — immutable settings built from CLI options or env vars."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_ENV_PREFIX = "GITHUB_RECEIVER_"
_TRUE_VALUES = {"1", "true", "yes", "on"}

DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Missing or contradictory receiver settings."""


@dataclass(frozen=True)
class ReceiverConfig:
    """Per-handler configuration, fixed at construction time."""

    default_repo: str
    auto_close: bool = False
    extra_labels: tuple[str, ...] = ()  # alert labels surfaced in issue bodies
    issue_labels: tuple[str, ...] = ()  # tracker labels added to new issues
    timeout: float = DEFAULT_TIMEOUT  # seconds per tracker call


@dataclass(frozen=True)
class Settings:
    """Process-wide settings: tracker selection plus the receiver config."""

    repo: str
    org: str = ""
    authtoken: str | None = field(default=None, repr=False)
    auto_close: bool = False
    labels: tuple[str, ...] = ()
    extra_labels: tuple[str, ...] = ()
    inmemory: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.repo:
            raise ConfigError("a default repository is required")
        if not self.inmemory:
            if not self.org:
                raise ConfigError("an organisation is required for the GitHub tracker")
            if not self.authtoken:
                raise ConfigError("an auth token is required for the GitHub tracker")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    def receiver_config(self) -> ReceiverConfig:
        return ReceiverConfig(
            default_repo=self.repo,
            auto_close=self.auto_close,
            extra_labels=self.extra_labels,
            issue_labels=self.labels,
            timeout=self.timeout,
        )

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``GITHUB_RECEIVER_*`` environment variables."""
        timeout_raw = _env("TIMEOUT") or str(DEFAULT_TIMEOUT)
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ConfigError(f"invalid timeout: {timeout_raw!r}") from exc
        return cls(
            repo=_env("REPO"),
            org=_env("ORG"),
            authtoken=resolve_token(_env("AUTHTOKEN") or None, _env("AUTHTOKEN_FILE") or None),
            auto_close=_env("AUTO_CLOSE").lower() in _TRUE_VALUES,
            labels=split_list(_env("LABELS")),
            extra_labels=split_list(_env("EXTRA_LABELS")),
            inmemory=_env("INMEMORY").lower() in _TRUE_VALUES,
            timeout=timeout,
        )


def resolve_token(token: str | None, token_file: str | None) -> str | None:
    """Return the auth token given directly or read from *token_file*.

    Giving both is an error.  Surrounding whitespace in the file is ignored.
    """
    if token and token_file:
        raise ConfigError("give either an auth token or an auth token file, not both")
    if token_file:
        try:
            return Path(token_file).read_text().strip() or None
        except OSError as exc:
            raise ConfigError(f"cannot read auth token file {token_file!r}: {exc}") from exc
    return token


def split_list(value: str) -> tuple[str, ...]:
    """Split a comma separated env value, dropping blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env(name: str) -> str:
    return os.environ.get(f"{_ENV_PREFIX}{name}", "").strip()
