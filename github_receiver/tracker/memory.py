"""In-memory tracker — keeps issues in process, for local runs and tests."""

from __future__ import annotations

import asyncio

import structlog

from github_receiver.alerts import TrackerError
from github_receiver.tracker import Issue

log = structlog.get_logger("github_receiver.tracker")


class InMemoryTracker:
    """Issue tracker that never leaves the process.

    Issues are numbered from 1 in creation order.  Closed issues are kept
    but no longer reported by :meth:`list_open_issues`.
    """

    def __init__(self, org: str = "local") -> None:
        self._org = org
        self._issues: dict[int, Issue] = {}
        self._open: set[int] = set()
        self._next_number = 1
        self._lock = asyncio.Lock()

    async def list_open_issues(self) -> list[Issue]:
        async with self._lock:
            return [self._issues[n] for n in sorted(self._open)]

    async def create_issue(
        self, repo: str, title: str, body: str, extra_labels: list[str]
    ) -> Issue:
        async with self._lock:
            number = self._next_number
            self._next_number += 1
            issue = Issue(
                title=title,
                body=body,
                repository=f"{self._org}/{repo}",
                number=number,
                url=f"memory://{self._org}/{repo}/issues/{number}",
            )
            self._issues[number] = issue
            self._open.add(number)
        log.debug("memory.issue_created", number=number, title=title, labels=extra_labels)
        return issue

    async def close_issue(self, issue: Issue) -> Issue:
        async with self._lock:
            if issue.number not in self._open:
                raise TrackerError(f"issue {issue.number!r} is not open")
            self._open.discard(issue.number)
            return self._issues[issue.number]
