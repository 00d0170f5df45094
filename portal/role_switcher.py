"""Development-only role switching and impersonation for Admins."""

import logging

import config
from portal.session import (
    DEV_ROLE_OVERRIDE,
    DEV_USER_OVERRIDE,
    ORIGINAL_USER,
    AuthSession,
)

logger = logging.getLogger(__name__)

DEV_ENVS = ("development", "dev")


class RoleSwitcherUnavailable(Exception):
    """Raised outside development or for users who are not really Admins."""


class RoleSwitcher:
    """
    Lets an Admin view the portal as another role or user.

    The real user is kept under ``originalUser`` so ``restore`` can put it
    back. The API token is never changed, so server checks still see the
    Admin.
    """

    def __init__(self, session: AuthSession, env: str | None = None):
        env = (env or config.settings.APP_ENV).lower()
        if env not in DEV_ENVS:
            raise RoleSwitcherUnavailable("Role switching is only available in development")

        real_user = session.store.get(ORIGINAL_USER) or session.user
        if not real_user or real_user.get("role") != "Admin":
            raise RoleSwitcherUnavailable("Role switching requires an Admin account")

        self.session = session
        self.store = session.store

    def _remember_original(self) -> None:
        if self.store.get(ORIGINAL_USER) is None and self.store.get(DEV_ROLE_OVERRIDE) is None:
            self.store.set(ORIGINAL_USER, self.session.user)

    def switch_role(self, role: str) -> dict:
        self._remember_original()
        self.store.set(DEV_ROLE_OVERRIDE, role)
        self.session.set_user({**self.session.user, "role": role})
        logger.info("Dev role override: %s", role)
        return self.session.user

    def impersonate(self, user: dict) -> dict:
        self._remember_original()
        self.store.set(DEV_ROLE_OVERRIDE, user.get("role"))
        self.store.set(DEV_USER_OVERRIDE, user)
        self.session.set_user(user)
        logger.info("Dev user override: %s", user.get("email"))
        return self.session.user

    def restore(self) -> dict | None:
        original = self.store.get(ORIGINAL_USER)
        if original:
            self.session.set_user(original)
        self.store.remove(ORIGINAL_USER, DEV_ROLE_OVERRIDE, DEV_USER_OVERRIDE)
        return self.session.user

    async def list_estimators(self) -> list[dict]:
        users = await self.session.api.get("/users/get-users", params={"role": "Estimator"})
        return [user for user in users if user.get("role") == "Estimator"]
