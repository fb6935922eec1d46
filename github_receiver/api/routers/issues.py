"""Open issues router — what the receiver is currently tracking."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from github_receiver.alerts.handler import ReceiverHandler
from github_receiver.api.deps import get_receiver_handler
from github_receiver.api.schemas.issue import IssueList, IssueListItem

router = APIRouter()


@router.get("/", response_model=IssueList)
async def list_issues(
    handler: ReceiverHandler = Depends(get_receiver_handler),
) -> IssueList:
    issues = await handler.open_issues()
    return IssueList(
        issues=[
            IssueListItem(
                title=i.title,
                repository=i.repository,
                number=i.number,
                url=i.url,
            )
            for i in issues
        ]
    )
