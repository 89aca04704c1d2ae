import logging
from fastapi import APIRouter, Request, Response

from zammad_sdk.realtime.webhook import WebhookReceiver

logger = logging.getLogger(__name__)


def create_webhook_router(receiver: WebhookReceiver) -> APIRouter:
    """Build a router exposing ``POST <options.path>`` for Zammad webhooks"""
    router = APIRouter(tags=["webhooks"])

    @router.post(receiver.options.path, include_in_schema=False)
    async def handle_zammad_webhook(request: Request) -> Response:
        """Handle incoming Zammad webhooks"""
        # Starlette caches the body, so later readers still see it
        body = await request.body()
        status_code = await receiver.handle(body, request.headers)
        return Response(status_code=status_code)

    return router
