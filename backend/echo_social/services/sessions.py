"""In-process session tokens issued at login and presented on the realtime channel."""

from __future__ import annotations

import logging
import secrets
from collections import defaultdict

logger = logging.getLogger(__name__)


class SessionTokenStore:
    """Maps opaque bearer tokens to user ids for the lifetime of the process.

    Each user keeps at most ``max_tokens_per_user`` live tokens; issuing one
    more revokes that user's oldest token.
    """

    def __init__(self, token_bytes: int = 32, max_tokens_per_user: int = 5) -> None:
        self._token_bytes = token_bytes
        self._max_tokens_per_user = max(1, max_tokens_per_user)
        self._user_by_token: dict[str, int] = {}
        self._tokens_by_user: dict[int, list[str]] = defaultdict(list)

    def issue(self, user_id: int) -> str:
        token = secrets.token_urlsafe(self._token_bytes)
        self._user_by_token[token] = user_id
        tokens = self._tokens_by_user[user_id]
        tokens.append(token)
        while len(tokens) > self._max_tokens_per_user:
            self._user_by_token.pop(tokens.pop(0), None)
        logger.info("sessions.issued user_id=%s active=%d", user_id, len(self._user_by_token))
        return token

    def resolve(self, token: str | None) -> int | None:
        if not token:
            return None
        return self._user_by_token.get(token)

    def verify(self, token: str | None, user_id: int) -> bool:
        """Return True when ``token`` was issued to ``user_id``."""

        resolved = self.resolve(token)
        return resolved is not None and secrets.compare_digest(str(resolved), str(user_id))

    def revoke(self, token: str) -> bool:
        user_id = self._user_by_token.pop(token, None)
        if user_id is None:
            return False
        tokens = self._tokens_by_user[user_id]
        tokens.remove(token)
        if not tokens:
            del self._tokens_by_user[user_id]
        return True

    def __len__(self) -> int:
        return len(self._user_by_token)
