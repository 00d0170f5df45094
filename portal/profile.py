"""Profile drawer: the current user's profile and remembered client."""

import logging

from portal.http import ApiError, Failure, FetchState, Loading, Success
from portal.session import LAST_CLIENT_ID, AuthSession

logger = logging.getLogger(__name__)


class ProfileDrawer:
    def __init__(self, session: AuthSession):
        self.session = session
        self.state: FetchState = Loading()

    @property
    def last_client_id(self) -> str | None:
        return self.session.store.get(LAST_CLIENT_ID)

    async def load(self) -> FetchState:
        """
        Fetch the profile and refresh the stored user.

        The first linked client is remembered as ``lastClientId`` when none
        is stored yet.
        """
        self.state = Loading()
        try:
            profile = await self.session.api.get("/users/profile")
        except ApiError as e:
            logger.warning("Failed to load profile: %s", e)
            self.state = Failure(e)
            return self.state
        self.session.set_user(profile)

        linked = profile.get("linked_clients") or []
        if linked and not self.last_client_id:
            self.remember_client(linked[0])
        self.state = Success(profile)
        return self.state

    async def update(self, **changes) -> dict:
        """Update name, phone, avatar or table preferences."""
        profile = await self.session.api.patch("/users/profile", json=changes)
        self.session.set_user(profile)
        logger.info("Profile updated: %s", ", ".join(sorted(changes)))
        return profile

    def remember_client(self, client_id) -> None:
        self.session.store.set(LAST_CLIENT_ID, str(client_id))
