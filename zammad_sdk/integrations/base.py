"""
Base integration classes and utilities
"""
from typing import List, Optional
import time
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiting utility for API calls"""

    def __init__(self, max_requests: int, time_window: int = 60):
        """
        Args:
            max_requests: Maximum requests allowed in time window
            time_window: Time window in seconds (default: 60 seconds)
        """
        if max_requests <= 0:
            raise ValueError("max_requests must be greater than 0")
        self.max_requests = max_requests
        self.time_window = time_window
        self.requests: List[float] = []

    def _prune(self, now: float) -> None:
        cutoff = now - self.time_window
        self.requests = [req for req in self.requests if req > cutoff]

    def can_make_request(self) -> bool:
        """Check if we can make a request without exceeding rate limit"""
        self._prune(time.monotonic())
        return len(self.requests) < self.max_requests

    def record_request(self):
        """Record a request being made"""
        self.requests.append(time.monotonic())

    def get_wait_time(self) -> float:
        """Get seconds to wait before making next request"""
        if self.can_make_request():
            return 0

        # Window frees up when the oldest request ages out
        oldest_request = min(self.requests)
        wait_time = self.time_window - (time.monotonic() - oldest_request)
        return max(0, wait_time)


class ZammadError(Exception):
    """Base exception for all SDK errors"""
    pass


class ZammadApiError(ZammadError):
    """Raised when the Zammad API answers with an error status code"""

    def __init__(self, status_code: int, url: str, response_body: str = "", message: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        self.response_body = response_body
        super().__init__(
            message or f"Zammad API request failed with status {status_code} for {url}: {response_body}"
        )


class AuthenticationError(ZammadApiError):
    """Raised when authentication fails or the client has no usable credentials"""

    def __init__(self, url: str = "", response_body: str = "", message: Optional[str] = None):
        super().__init__(401, url, response_body, message or "Invalid Zammad credentials")


class RateLimitError(ZammadApiError):
    """Raised when rate limit is still exceeded after retries"""

    def __init__(self, url: str, response_body: str = "", retries: int = 0):
        super().__init__(
            429, url, response_body,
            f"Rate limit exceeded after {retries} retries for {url}"
        )


class TransportError(ZammadError):
    """Raised when a request cannot be delivered (connection errors, timeouts)"""
    pass
