"""Issue listing schemas."""

from __future__ import annotations

from pydantic import BaseModel


class IssueListItem(BaseModel):
    title: str
    repository: str
    number: int | None = None
    url: str = ""


class IssueList(BaseModel):
    """Open alert issues, in tracker order."""

    issues: list[IssueListItem]
