"""Administrative mutations against the live router.

Commands always look the target up on the device itself, never in the
cached snapshot.  They do not trigger a re-poll: the next scheduled snapshot
reflects the change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routerwatch.api.errors import MutateError, NotFoundError
from routerwatch.telemetry.normalize import parse_disabled_flag

if TYPE_CHECKING:
    from routerwatch.api.router import RouterAPI
    from routerwatch.models.router import HotspotUser

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Enable, disable and remove hotspot users."""

    def __init__(self, api: RouterAPI) -> None:
        self._api = api

    async def _require_user(self, username: str) -> HotspotUser:
        user = await self._api.find_user(username)
        if user is None:
            raise NotFoundError("User", username)
        return user

    async def toggle_user_disabled(self, username: str) -> bool:
        """Flip the user's disabled flag and return the new state."""
        user = await self._require_user(username)
        return await self._apply_disabled(user, not parse_disabled_flag(user.disabled))

    async def set_user_disabled(self, username: str, disabled: bool) -> bool:
        """Set the user's disabled flag explicitly and return it."""
        user = await self._require_user(username)
        return await self._apply_disabled(user, disabled)

    async def _apply_disabled(self, user: HotspotUser, disabled: bool) -> bool:
        try:
            await self._api.set_user_disabled(user.id or user.name, disabled)
        except MutateError:
            logger.error("Failed to %s user %s", "disable" if disabled else "enable", user.name)
            raise
        logger.info("User %s %s", user.name, "disabled" if disabled else "enabled")
        return disabled

    async def delete_user(self, username: str) -> None:
        """Remove the user from the router."""
        user = await self._require_user(username)
        try:
            await self._api.remove_user(user.id or user.name)
        except MutateError:
            logger.error("Failed to remove user %s", username)
            raise
        logger.info("User %s removed", username)
