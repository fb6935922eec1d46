"""Webhook router — the Alertmanager receiver endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from github_receiver.alerts.handler import ReceiverHandler
from github_receiver.api.deps import get_receiver_handler

router = APIRouter()

# Common methods are routed here so the handler answers non-POST itself;
# any other method gets the same empty 405 from api.errors.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/receiver", methods=_ALL_METHODS)
async def receive_webhook(
    request: Request,
    handler: ReceiverHandler = Depends(get_receiver_handler),
) -> Response:
    return await handler.serve(request)
