"""
Server-side session records kept in Redis.

The client only ever holds the opaque token; identity fields live under
``session:<token>`` until logout or expiry.
"""

import json
import logging
from typing import Optional

import redis

from ..core.security import generate_session_token
from ..schemas.auth import SessionUser

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"


class SessionStoreError(Exception):
    """The session backend could not complete an operation."""


class SessionStore:
    def __init__(self, client, expire_seconds: int):
        self.client = client
        self.expire_seconds = expire_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"{KEY_PREFIX}{token}"

    def create(self, user: SessionUser) -> str:
        token = generate_session_token()
        try:
            self.client.setex(self._key(token), self.expire_seconds, user.model_dump_json())
        except redis.RedisError as e:
            logger.error(f"Failed to create session for {user.username}: {str(e)}")
            raise SessionStoreError("Could not create session") from e
        return token

    def get(self, token: Optional[str]) -> Optional[SessionUser]:
        if not token:
            return None
        try:
            raw = self.client.get(self._key(token))
        except redis.RedisError as e:
            logger.error(f"Failed to read session: {str(e)}")
            return None
        if raw is None:
            return None
        try:
            return SessionUser(**json.loads(raw))
        except (ValueError, TypeError):
            logger.warning("Discarding malformed session record")
            return None

    def destroy(self, token: str) -> bool:
        """Delete a session. Returns whether a record existed."""
        try:
            return bool(self.client.delete(self._key(token)))
        except redis.RedisError as e:
            logger.error(f"Failed to destroy session: {str(e)}")
            raise SessionStoreError("Could not destroy session") from e
