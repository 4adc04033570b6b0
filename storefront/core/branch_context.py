"""Resolve which store branch scopes data queries for the current user.

STAFF users are locked to their assigned branch. Every other role (ADMIN,
MANAGER, or no user at all) reads one process-wide preference slot that
holds either ``"all"`` or a branch id.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from storefront.core.constants import ALL_BRANCHES, BRANCH_QUERY_PARAM, BRANCH_STORAGE_KEY
from storefront.core.storage import KeyValueStorage
from storefront.domain.entities.user import SessionUser
from storefront.domain.value_objects import UserRole

logger = logging.getLogger(__name__)

UserLike = SessionUser | Mapping[str, Any] | None


class BranchContext:
    """Branch resolver over a single persisted preference."""

    def __init__(self, storage: KeyValueStorage, key: str = BRANCH_STORAGE_KEY):
        self._storage = storage
        self._key = key

    def _saved(self) -> str:
        value = self._storage.get_item(self._key)
        return value or ""

    @staticmethod
    def _locked_branch(user: UserLike) -> str | None:
        """Branch of a STAFF user ("" when unset), None for other roles."""
        role, branch_id = SessionUser.branch_scope(user)
        if role != UserRole.STAFF.value:
            return None
        return branch_id or ""

    def get_active_branch_id(self, user: UserLike) -> str:
        locked = self._locked_branch(user)
        if locked is not None:
            return locked
        return self._saved() or ALL_BRANCHES

    def get_active_branch_raw(self, user: UserLike) -> str:
        """Value shown in the branch selector."""
        return self.get_active_branch_id(user)

    def get_effective_branch_id(self, user: UserLike) -> str | None:
        """Branch filter for API reads; None means every branch."""
        branch_id = self.get_active_branch_id(user)
        if not branch_id or branch_id == ALL_BRANCHES:
            return None
        return branch_id

    def get_pos_branch_id(self, user: UserLike) -> str:
        """The POS sells from one concrete store; "" means one must be picked."""
        locked = self._locked_branch(user)
        if locked is not None:
            return locked
        saved = self._saved()
        if saved and saved != ALL_BRANCHES:
            return saved
        return ""

    def branch_query_params(self, user: UserLike) -> dict[str, str]:
        branch_id = self.get_effective_branch_id(user)
        return {BRANCH_QUERY_PARAM: branch_id} if branch_id else {}

    def set_active_branch_id(self, branch_id: str, user: UserLike = None) -> bool:
        """Persist the selected branch. STAFF users cannot change it."""
        if self._locked_branch(user) is not None:
            logger.warning("Ignoring branch change to %r requested for a STAFF user", branch_id)
            return False
        self._storage.set_item(self._key, str(branch_id))
        return True

    def reset_active_branch(self) -> None:
        self._storage.remove_item(self._key)
