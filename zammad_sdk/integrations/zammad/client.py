"""
Zammad API client with authentication, retries and rate limiting
"""
import requests
import time
import logging
from typing import Dict, Any, Optional, Callable

from zammad_sdk.integrations.base import (
    RateLimiter,
    ZammadError,
    ZammadApiError,
    AuthenticationError,
    RateLimitError,
    TransportError,
)
from zammad_sdk.integrations.zammad.resources import (
    TicketsClient,
    TicketArticlesClient,
    UsersClient,
    GroupsClient,
    OrganizationsClient,
    RolesClient,
    PermissionsClient,
    TagsClient,
    LinksClient,
    TicketStatesClient,
    TicketPrioritiesClient,
    UserAccessTokensClient,
)
from zammad_sdk.realtime.events import EventKind
from zammad_sdk.realtime.monitor import TicketMonitor, EventHandler

logger = logging.getLogger(__name__)


class ZammadClient:
    """
    Entry point for the Zammad REST API.

    Groups the resource sub-clients (``tickets``, ``users``, ...) and exposes the
    notification hub as ``monitor`` so applications can subscribe to ticket events
    produced by the webhook receiver or the polling service.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 100.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        rate_limiter: Optional[RateLimiter] = None,
        monitor: Optional[TicketMonitor] = None,
    ):
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/v1"
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.rate_limiter = rate_limiter or RateLimiter(max_requests=60, time_window=60)

        if session is None:
            # Request session for connection pooling
            session = requests.Session()
            session.headers.update({"Accept": "application/json"})
            self._configure_authentication(session, token, username, password)
        self.session = session

        self.monitor = monitor or TicketMonitor()

        self.tickets = TicketsClient(self)
        self.ticket_articles = TicketArticlesClient(self)
        self.users = UsersClient(self)
        self.groups = GroupsClient(self)
        self.organizations = OrganizationsClient(self)
        self.roles = RolesClient(self)
        self.permissions = PermissionsClient(self)
        self.tags = TagsClient(self)
        self.links = LinksClient(self)
        self.ticket_states = TicketStatesClient(self)
        self.ticket_priorities = TicketPrioritiesClient(self)
        self.user_access_tokens = UserAccessTokensClient(self)

    @classmethod
    def from_settings(cls, settings, monitor: Optional[TicketMonitor] = None) -> "ZammadClient":
        """Build a client from :class:`zammad_sdk.core.config.Settings`"""
        if not settings.zammad_url:
            raise ValueError("ZAMMAD_URL is not configured")
        return cls(
            settings.zammad_url,
            token=settings.zammad_token,
            username=settings.zammad_username,
            password=settings.zammad_password,
            timeout=settings.zammad_timeout,
            max_retries=settings.zammad_max_retries,
            rate_limiter=RateLimiter(
                max_requests=settings.zammad_rate_limit_requests,
                time_window=settings.zammad_rate_limit_window,
            ),
            monitor=monitor,
        )

    @staticmethod
    def _configure_authentication(
        session: requests.Session,
        token: Optional[str],
        username: Optional[str],
        password: Optional[str],
    ) -> None:
        if token and token.strip():
            session.headers["Authorization"] = f"Token token={token}"
            return

        if username and password:
            session.auth = (username, password)
            return

        logger.warning("Zammad client created without credentials; requests will be sent unauthenticated")

    def _build_url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def _wait_for_rate_limit(self) -> None:
        if not self.rate_limiter.can_make_request():
            wait_time = self.rate_limiter.get_wait_time()
            if wait_time > 0:
                logger.info(f"Rate limit reached, waiting {wait_time:.1f} seconds")
                time.sleep(wait_time)

    @staticmethod
    def _retry_after(response: requests.Response, default: float) -> float:
        try:
            return float(response.headers.get("Retry-After", default))
        except (TypeError, ValueError):
            return default

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        Make a rate-limited request to the Zammad API with retry logic

        Retries 429 (honouring Retry-After), 5xx responses and connection errors with
        exponential backoff. 401 and other 4xx responses are raised immediately.
        """
        url = self._build_url(path)
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        for attempt in range(self.max_retries + 1):
            self._wait_for_rate_limit()
            try:
                self.rate_limiter.record_request()
                response = self.session.request(
                    method, url, params=params or None, json=json, headers=headers, timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                if attempt < self.max_retries:
                    logger.warning(f"Request to {url} failed, retrying (attempt {attempt + 1}): {e}")
                    time.sleep(self.retry_delay * (2 ** attempt))
                    continue
                raise TransportError(f"Request to {url} failed after {self.max_retries} retries: {e}") from e

            if response.status_code == 429:
                if attempt < self.max_retries:
                    retry_after = self._retry_after(response, self.retry_delay * (2 ** attempt))
                    logger.warning(f"Rate limited, retrying after {retry_after} seconds (attempt {attempt + 1})")
                    time.sleep(retry_after)
                    continue
                raise RateLimitError(url, response.text, self.max_retries)

            if response.status_code == 401:
                raise AuthenticationError(url, response.text)

            if response.status_code >= 400:
                logger.error(f"Zammad API error {response.status_code} for {method} {url}: {response.text}")
                if response.status_code >= 500 and attempt < self.max_retries:
                    time.sleep(self.retry_delay * (2 ** attempt))
                    continue
                raise ZammadApiError(response.status_code, url, response.text)

            return response

        raise ZammadError("Unexpected error in request handling")

    def send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        on_behalf_of: Optional[str] = None,
    ) -> Any:
        """Send a request and decode the JSON body; empty bodies decode to None"""
        headers = {"X-On-Behalf-Of": on_behalf_of} if on_behalf_of else None
        response = self.request(method, path, params=params, json=json, headers=headers)
        if not response.content or not response.content.strip():
            return None
        return response.json()

    def download(self, path: str) -> bytes:
        """Fetch a binary resource such as an attachment"""
        return self.request("GET", path).content

    # Notification surface

    def subscribe(self, kind: EventKind, handler: EventHandler) -> EventHandler:
        return self.monitor.subscribe(kind, handler)

    def unsubscribe(self, kind: EventKind, handler: EventHandler) -> bool:
        return self.monitor.unsubscribe(kind, handler)

    def on(self, kind: EventKind) -> Callable[[EventHandler], EventHandler]:
        return self.monitor.on(kind)

    def test_connection(self) -> bool:
        """Test connection to the Zammad API"""
        try:
            self.users.get_current_user()
            return True
        except ZammadError as e:
            logger.error(f"Zammad connection test failed: {e}")
            return False

    def get_rate_limit_status(self) -> Dict[str, Any]:
        """Get current rate limit status"""
        return {
            "max_requests": self.rate_limiter.max_requests,
            "time_window": self.rate_limiter.time_window,
            "current_requests": len(self.rate_limiter.requests),
            "requests_remaining": self.rate_limiter.max_requests - len(self.rate_limiter.requests),
            "wait_time": self.rate_limiter.get_wait_time(),
            "can_make_request": self.rate_limiter.can_make_request(),
        }

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
