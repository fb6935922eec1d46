"""Dependency injection — tracker and receiver handler singletons."""

from __future__ import annotations

import structlog

from github_receiver.alerts.handler import ReceiverHandler
from github_receiver.core.config import Settings
from github_receiver.tracker import IssueTracker
from github_receiver.tracker.github import GitHubTracker
from github_receiver.tracker.memory import InMemoryTracker

log = structlog.get_logger("github_receiver.api")

# ---------------------------------------------------------------------------
# Singletons (initialised by app lifespan)
# ---------------------------------------------------------------------------
_tracker: IssueTracker | None = None
_handler: ReceiverHandler | None = None


def build_tracker(settings: Settings) -> IssueTracker:
    """Select the tracker backend named by *settings*."""
    if settings.inmemory:
        return InMemoryTracker(org=settings.org or "local")
    return GitHubTracker(settings.org, settings.authtoken, timeout=settings.timeout)


def init_handler(settings: Settings) -> ReceiverHandler:
    """Create the tracker and handler. Called once at startup."""
    global _tracker, _handler  # noqa: PLW0603
    _tracker = build_tracker(settings)
    _handler = ReceiverHandler(_tracker, settings.receiver_config())
    log.info(
        "receiver.configured",
        tracker=type(_tracker).__name__,
        org=settings.org,
        default_repo=settings.repo,
        auto_close=settings.auto_close,
    )
    return _handler


async def close_tracker() -> None:
    """Release the tracker's connections, if it holds any."""
    global _tracker, _handler  # noqa: PLW0603
    if isinstance(_tracker, GitHubTracker):
        await _tracker.close()
    _tracker = None
    _handler = None


def get_receiver_handler() -> ReceiverHandler:
    if _handler is None:
        raise RuntimeError("call init_handler() before handling requests")
    return _handler
