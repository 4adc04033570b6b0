"""Auth token and user profile slots written at login."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from storefront.core.constants import TOKEN_STORAGE_KEY, USER_STORAGE_KEY
from storefront.core.storage import KeyValueStorage
from storefront.domain.entities.user import SessionUser

logger = logging.getLogger(__name__)


class AuthSession:
    """Stores the bearer token and the logged-in user."""

    def __init__(
        self,
        storage: KeyValueStorage,
        token_key: str = TOKEN_STORAGE_KEY,
        user_key: str = USER_STORAGE_KEY,
    ):
        self._storage = storage
        self._token_key = token_key
        self._user_key = user_key

    def login(self, token: str, user: SessionUser | Mapping[str, Any]) -> SessionUser:
        session_user = SessionUser.coerce(user)
        self._storage.set_item(self._token_key, token)
        self._storage.set_item(self._user_key, json.dumps(session_user.to_dict(), ensure_ascii=False))
        logger.info("Logged in user %s (%s)", session_user.display_name, session_user.role or "-")
        return session_user

    def logout(self) -> None:
        """Forget token and user. The branch preference is left as is."""
        self._storage.remove_item(self._token_key)
        self._storage.remove_item(self._user_key)

    def get_token(self) -> str | None:
        return self._storage.get_item(self._token_key) or None

    def is_authenticated(self) -> bool:
        return bool(self.get_token())

    def get_current_user(self) -> SessionUser | None:
        raw = self._storage.get_item(self._user_key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        try:
            return SessionUser.model_validate(data)
        except ValidationError as e:
            logger.warning("Stored user profile is invalid: %s", e)
            return None
