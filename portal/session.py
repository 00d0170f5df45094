"""Persisted login state for the portal."""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

import config
from portal.http import ApiClient

logger = logging.getLogger(__name__)

AUTH_USER = "authUser"
AUTH_TOKEN = "authToken"
DEV_ROLE_OVERRIDE = "devRoleOverride"
DEV_USER_OVERRIDE = "devUserOverride"
ORIGINAL_USER = "originalUser"
LAST_CLIENT_ID = "lastClientId"

SESSION_KEYS = (AUTH_USER, AUTH_TOKEN, DEV_ROLE_OVERRIDE, DEV_USER_OVERRIDE, ORIGINAL_USER)


class LocalStore:
    """JSON-file key/value store. Every write is flushed to disk."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or config.settings.PORTAL_STATE_FILE).expanduser()
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable portal state %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2, default=str), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)
        self._save()

    def __contains__(self, key: str) -> bool:
        return key in self._data


class AuthSession:
    """
    Current user and token, hydrated from the store on construction.

    There is no refresh: an expired token surfaces as a 401 from the API.
    """

    def __init__(
        self,
        store: LocalStore | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store or LocalStore()
        self.user: dict | None = self.store.get(AUTH_USER)
        self.token: str | None = self.store.get(AUTH_TOKEN)
        self.api = ApiClient(base_url, session=self, transport=transport)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    @property
    def role(self) -> str | None:
        return self.user.get("role") if self.user else None

    def set_user(self, user: dict) -> None:
        self.user = user
        self.store.set(AUTH_USER, user)

    async def login(self, email: str, password: str) -> dict:
        """
        Log in and persist the user and token.

        Raises:
            ApiError: 401 on wrong credentials, 403 for blocked accounts
        """
        data = await self.api.post(
            "/auth/login",
            json={"email": email, "password": password},
            secure=False,
        )
        self.token = data["token"]
        self.store.set(AUTH_TOKEN, self.token)
        self.set_user(data["user"])
        logger.info("Logged in as %s", email)
        return self.user

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.store.remove(*SESSION_KEYS)
