"""
Memoized user lookup shared by the webhook and polling paths
"""
import asyncio
import logging
from typing import Dict, Optional

from zammad_sdk.schemas import User

logger = logging.getLogger(__name__)


class UserCache:
    """Resolves user ids through ``UsersClient.get_user``, remembering each answer"""

    def __init__(self, users_client):
        self._users = users_client
        self._cache: Dict[int, User] = {}

    async def get(self, user_id: Optional[int]) -> Optional[User]:
        if user_id is None or user_id <= 0:
            return None

        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        # The REST client is blocking; keep it off the event loop
        user = await asyncio.to_thread(self._users.get_user, user_id)
        self._cache[user_id] = user
        logger.debug(f"Cached user {user_id}")
        return user

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._cache
