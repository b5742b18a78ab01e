from __future__ import annotations

import logging
from typing import Callable

from providerdash.config import Settings
from providerdash.domain import User

logger = logging.getLogger(__name__)


class AuthSession:
    """The signed-in user and the sign-out action.

    Signing in happens elsewhere; the dashboard only reads `user` and may call
    `sign_out()`.
    """

    def __init__(self, user: User, token: str | None = None) -> None:
        self._user = user
        self._token = token
        self._signed_in = True
        self._listeners: list[Callable[[], None]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthSession:
        user = User(id=settings.user_id, name=settings.user_name, avatar_url=settings.user_avatar_url)
        return cls(user, token=settings.api_token)

    @property
    def user(self) -> User:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def signed_in(self) -> bool:
        return self._signed_in

    def on_sign_out(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def sign_out(self) -> None:
        logger.info("Signing out user id=%s", self._user.id)
        self._token = None
        self._signed_in = False
        for callback in list(self._listeners):
            callback()
