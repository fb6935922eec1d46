"""Webhook request handling — read, decode, reconcile, apply."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from starlette.requests import Request
from starlette.responses import Response

from github_receiver.alerts import (
    ListError,
    MethodError,
    ReadError,
    TrackerError,
)
from github_receiver.alerts.models import WebhookMessage, decode_message
from github_receiver.alerts.reconciler import Action, CloseAction, CreateAction, reconcile
from github_receiver.core.config import ReceiverConfig
from github_receiver.tracker import Issue, IssueTracker

log = structlog.get_logger("github_receiver.handler")

T = TypeVar("T")


class ReceiverHandler:
    """Turns Alertmanager webhook requests into tracker calls.

    Holds no state besides the tracker and its immutable config, so one
    instance serves concurrent requests.  Every failure is raised as a
    :class:`~github_receiver.alerts.ReceiverError` subclass and ends the
    request; the API layer maps it to a status code.
    """

    def __init__(self, tracker: IssueTracker, config: ReceiverConfig) -> None:
        self.tracker = tracker
        self.config = config

    async def serve(self, request: Request) -> Response:
        if request.method != "POST":
            raise MethodError(f"method {request.method} not allowed")

        try:
            body = await request.body()
        except Exception as exc:
            raise ReadError(f"failed to read request body: {exc}") from exc

        message = decode_message(body)
        await self.process(message)
        return Response(status_code=200)

    async def process(self, message: WebhookMessage) -> list[Action]:
        """List open issues, reconcile, and apply the resulting actions.

        Stops at the first tracker failure.  Actions applied before it are
        not rolled back.
        """
        bound = log.bind(group_key=message.group_key, alerts=len(message.alerts))
        try:
            open_issues = await self.open_issues()
        except ListError as exc:
            bound.error("receiver.list_failed", error=str(exc))
            raise

        actions = reconcile(message, open_issues, self.config)
        for done, action in enumerate(actions):
            try:
                await self._apply(action)
            except TrackerError as exc:
                bound.error(
                    "receiver.apply_failed",
                    action=type(action).__name__,
                    applied=done,
                    pending=len(actions) - done,
                    error=str(exc),
                )
                raise
        bound.info("receiver.processed", actions=len(actions), open_issues=len(open_issues))
        return actions

    async def open_issues(self) -> list[Issue]:
        """Currently open issues, as :class:`ListError` on failure."""
        try:
            return await self._call(self.tracker.list_open_issues())
        except TrackerError as exc:
            raise ListError(str(exc)) from exc

    async def _apply(self, action: Action) -> None:
        if isinstance(action, CreateAction):
            issue = await self._call(
                self.tracker.create_issue(
                    action.repo, action.title, action.body, list(self.config.issue_labels)
                )
            )
            log.info(
                "receiver.issue_created",
                title=action.title,
                repo=action.repo,
                number=issue.number,
            )
        elif isinstance(action, CloseAction):
            await self._call(self.tracker.close_issue(action.issue))
            log.info(
                "receiver.issue_closed",
                title=action.issue.title,
                repo=action.issue.repository,
                number=action.issue.number,
            )

    async def _call(self, call: Awaitable[T]) -> T:
        """Await a tracker call under the configured timeout.

        Any failure surfaces as :class:`TrackerError`.
        """
        try:
            return await asyncio.wait_for(call, timeout=self.config.timeout)
        except TrackerError:
            raise
        except asyncio.TimeoutError as exc:
            raise TrackerError(f"tracker call timed out after {self.config.timeout}s") from exc
        except Exception as exc:
            raise TrackerError(f"tracker call failed: {exc}") from exc
