import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from zammad_sdk.core.config import Settings, get_settings
from zammad_sdk.core.logging import configure_logging
from zammad_sdk.integrations.zammad import ZammadClient
from zammad_sdk.realtime import (
    TicketMonitor,
    UserCache,
    WebhookOptions,
    WebhookReceiver,
    PollingOptions,
    PollingService,
)
from zammad_sdk.api.webhooks import create_webhook_router

logger = logging.getLogger(__name__)


def _poller_state(poller: Optional[PollingService]) -> str:
    if poller is None:
        return "disabled"
    return "running" if poller.is_running else "stopped"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the notification host.

    The webhook route is always mounted; the polling fallback only runs when
    ``ZAMMAD_POLLING_ENABLED`` is set. Both paths publish into the same monitor and
    share one user cache.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    monitor = TicketMonitor()
    client = ZammadClient.from_settings(settings, monitor=monitor)
    user_cache = UserCache(client.users)
    receiver = WebhookReceiver(client, monitor, WebhookOptions.from_settings(settings), user_cache)
    poller = None
    if settings.zammad_polling_enabled:
        poller = PollingService(client, monitor, PollingOptions.from_settings(settings), user_cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        logger.info("Starting up the notification host...")
        if not settings.zammad_webhook_secret_configured:
            logger.warning("ZAMMAD_WEBHOOK_SECRET is not set; webhook signatures will not be verified")

        monitor.start()
        if poller is not None:
            logger.warning(
                "Webhook and polling are both active; subscribers may receive duplicate events"
            )
            poller.start()

        yield

        # Shutdown
        logger.info("Shutting down the notification host...")
        if poller is not None:
            await poller.stop()
        monitor.stop()
        client.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Zammad ticket notification host",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client
    app.state.monitor = monitor
    app.state.receiver = receiver
    app.state.poller = poller

    app.include_router(create_webhook_router(receiver))

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        state = request.app.state
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "monitor": "started" if state.monitor.is_started else "stopped",
            "polling": _poller_state(state.poller),
            "webhook_path": receiver.options.path,
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "zammad_sdk.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=get_settings().log_level.lower(),
    )
