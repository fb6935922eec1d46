"""Issue tracker backends — the list/create/close capability the receiver needs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Issue:
    """An issue as reported by the tracker.

    The title is the correlation key with alerts. ``number`` is the
    tracker's own identity for the issue and is opaque to the receiver.
    """

    title: str
    body: str = ""
    repository: str = ""  # owner/repo
    number: int | None = None
    url: str = ""


@runtime_checkable
class IssueTracker(Protocol):
    """Capability set required from any tracker backend."""

    async def list_open_issues(self) -> list[Issue]: ...

    async def create_issue(
        self, repo: str, title: str, body: str, extra_labels: list[str]
    ) -> Issue: ...

    async def close_issue(self, issue: Issue) -> Issue: ...


__all__ = ["Issue", "IssueTracker"]
